from decimal import Decimal

import pytest

from suvarna.core.errors import NotFoundError, ValidationError
from suvarna.services import labour_charge_service, rate_ledger
from suvarna.services.pricing_service import Weight, price_invoice, price_line_item


def test_basic_gold_item(gold_rates):
    line = price_line_item(gold_rates, "gold", "24K", Weight(Decimal("10"), "g"))

    assert line.rate_per_gram == Decimal("6500")
    assert line.metal_price == Decimal("65000.00")
    assert line.labour_charge_amount == Decimal("0")
    assert line.item_total == Decimal("65000.00")


def test_per_gram_labour_charge(gold_rates, basic_making):
    line = price_line_item(gold_rates, "gold", "24K", Weight(10, "g"), labour_charge_id=basic_making.id)

    assert line.labour_charge_amount == Decimal("2000.00")
    assert line.labour_charge_type == "perGram"
    assert line.item_total == Decimal("67000.00")


def test_fixed_labour_charge(gold_rates, stone_setting):
    line = price_line_item(gold_rates, "gold", "24K", Weight(10, "g"), labour_charge_id=stone_setting.id)

    assert line.labour_charge_amount == Decimal("500.00")
    assert line.item_total == Decimal("65500.00")


def test_per_gram_charge_uses_converted_weight(gold_rates, basic_making):
    line = price_line_item(gold_rates, "gold", "22K", Weight(1, "tola"), labour_charge_id=basic_making.id)

    assert line.weight_in_grams == Decimal("11.66")
    assert line.metal_price == Decimal("69960.00")
    assert line.labour_charge_amount == Decimal("2332.00")
    assert line.item_total == Decimal("72292.00")


def test_pricing_is_deterministic(gold_rates, basic_making):
    first = price_line_item(gold_rates, "gold", "24K", Weight(Decimal("7.35"), "g"), basic_making.id)
    second = price_line_item(gold_rates, "gold", "24K", Weight(Decimal("7.35"), "g"), basic_making.id)

    assert first == second


def test_reprice_follows_current_rate(gold_rates):
    before = price_line_item(gold_rates, "gold", "24K", Weight(10, "g"))
    rate_ledger.upsert_rate(gold_rates, "gold", "24K", 6600)
    after = price_line_item(gold_rates, "gold", "24K", Weight(10, "g"))

    assert before.item_total == Decimal("65000.00")
    assert after.item_total == Decimal("66000.00")


def test_missing_rate_is_not_priced_at_zero(gold_rates):
    with pytest.raises(NotFoundError):
        price_line_item(gold_rates, "silver", "999", Weight(10, "g"))


def test_unknown_labour_charge(gold_rates):
    with pytest.raises(NotFoundError):
        price_line_item(gold_rates, "gold", "24K", Weight(10, "g"), labour_charge_id=999)


def test_inactive_labour_charge_cannot_be_applied(gold_rates, basic_making):
    labour_charge_service.deactivate_labour_charge(gold_rates, basic_making.id)

    with pytest.raises(NotFoundError):
        price_line_item(gold_rates, "gold", "24K", Weight(10, "g"), labour_charge_id=basic_making.id)


def test_unknown_unit_fails(gold_rates):
    with pytest.raises(ValidationError):
        price_line_item(gold_rates, "gold", "24K", Weight(10, "ounce"))


def test_unknown_item_type_fails(gold_rates):
    with pytest.raises(ValidationError) as exc:
        price_line_item(gold_rates, "platinum", "950", Weight(10, "g"))
    assert exc.value.field == "item_type"


def test_other_item_needs_explicit_rate(db):
    with pytest.raises(ValidationError):
        price_line_item(db, "other", "Brass", Weight(10, "g"))

    line = price_line_item(db, "other", "Brass", Weight(10, "g"), rate_per_gram=Decimal("1.25"))
    assert line.item_total == Decimal("12.50")


def test_metal_price_rounds_half_up(db):
    line = price_line_item(db, "other", "Alloy", Weight(Decimal("0.005"), "g"), rate_per_gram=1)
    assert line.metal_price == Decimal("0.01")


def test_invoice_aggregation():
    totals = price_invoice([Decimal("67000"), Decimal("30000")], 3, 50000)

    assert totals.subtotal == Decimal("97000")
    assert totals.gst_amount == Decimal("2910")
    assert totals.grand_total == Decimal("99910")
    assert totals.balance_due == Decimal("49910")
    assert totals.cgst_percent == Decimal("1.5")
    assert totals.cgst_amount == Decimal("1455")
    assert totals.sgst_amount == Decimal("1455")


def test_invoice_aggregation_from_priced_lines(gold_rates, basic_making):
    lines = [
        price_line_item(gold_rates, "gold", "24K", Weight(10, "g"), basic_making.id),
        price_line_item(gold_rates, "gold", "22K", Weight(5, "g")),
    ]

    totals = price_invoice(lines, Decimal("3"), Decimal("50000"))
    assert totals.subtotal == Decimal("97000")
    assert totals.grand_total == Decimal("99910")
    assert totals.balance_due == Decimal("49910")


def test_overpayment_is_a_credit():
    totals = price_invoice([Decimal("1000")], 3, 1100)

    assert totals.grand_total == Decimal("1030")
    assert totals.balance_due == Decimal("-70")


def test_odd_paisa_goes_to_sgst():
    totals = price_invoice([Decimal("0.33")], 3)

    assert totals.gst_amount == Decimal("0.01")
    assert totals.cgst_amount == Decimal("0.00")
    assert totals.sgst_amount == Decimal("0.01")


def test_zero_gst():
    totals = price_invoice([Decimal("500")], 0)
    assert totals.gst_amount == 0
    assert totals.grand_total == Decimal("500")


def test_negative_gst_is_rejected():
    with pytest.raises(ValidationError) as exc:
        price_invoice([Decimal("100")], -1)
    assert exc.value.field == "gst_percent"


def test_negative_payment_is_rejected():
    with pytest.raises(ValidationError):
        price_invoice([Decimal("100")], 3, -5)
