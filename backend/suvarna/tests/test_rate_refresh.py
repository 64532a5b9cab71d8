import threading
from decimal import Decimal

import pytest
import requests

from suvarna.core.errors import UpstreamUnavailableError
from suvarna.models.rate_record import RateRecord
from suvarna.services import rate_ledger
from suvarna.services.rate_feed import HttpRateFeed, StaticRateFeed, parse_feed_payload
from suvarna.services.rate_refresh import FAILED, PARTIAL, SKIPPED, SUCCESS, RateRefreshJob


class FailingFeed:
    def fetch_current_prices(self):
        raise UpstreamUnavailableError("feed down")


class BlockingFeed:
    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def fetch_current_prices(self):
        self.entered.set()
        self.release.wait(timeout=5)
        return [{"metal_type": "gold", "purity": "24K", "rate_per_gram": Decimal("6500")}]


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def test_refresh_applies_feed_rates_as_api(db, session_factory):
    job = RateRefreshJob(feed=StaticRateFeed(), session_factory=session_factory)

    result = job.refresh_from_external_source()

    assert result.outcome == SUCCESS
    assert result.applied == 5
    active = rate_ledger.get_active_rates(db)
    assert len(active) == 5
    assert {r.source for r in active} == {"api"}
    assert job.get_status()["last_outcome"] == SUCCESS


def test_second_refresh_supersedes_previous_rates(db, session_factory):
    job = RateRefreshJob(feed=StaticRateFeed(), session_factory=session_factory)
    job.refresh_from_external_source()
    job.refresh_from_external_source()

    assert db.query(RateRecord).count() == 10
    assert len(rate_ledger.get_active_rates(db)) == 5


def test_feed_failure_leaves_active_rates_untouched(db, session_factory):
    rate_ledger.upsert_rate(db, "gold", "24K", 6400)
    job = RateRefreshJob(feed=FailingFeed(), session_factory=session_factory)

    result = job.refresh_from_external_source()

    assert result.outcome == FAILED
    assert not result.success
    assert "feed down" in result.message
    assert db.query(RateRecord).count() == 1
    active = rate_ledger.get_rate(db, "gold", "24K")
    assert active.rate_per_gram == Decimal("6400")
    assert active.source == "manual"


def test_partial_feed_is_reported(db, session_factory):
    feed = StaticRateFeed([
        {"metal_type": "gold", "purity": "24K", "rate_per_gram": Decimal("6500")},
        {"metal_type": "gold", "purity": "22K", "rate_per_gram": Decimal("-1")},
    ])
    job = RateRefreshJob(feed=feed, session_factory=session_factory)

    result = job.refresh_from_external_source()

    assert result.outcome == PARTIAL
    assert (result.applied, result.failed) == (1, 1)
    assert result.errors[0].startswith("#1")
    assert rate_ledger.get_rate(db, "gold", "24K").source == "api"


def test_oversized_feed_quote_is_reported_not_raised(db, session_factory):
    feed = StaticRateFeed([
        {"metal_type": "gold", "purity": "24K", "rate_per_gram": Decimal("250000000")},
        {"metal_type": "silver", "purity": "Standard", "rate_per_gram": Decimal("80")},
    ])
    job = RateRefreshJob(feed=feed, session_factory=session_factory)

    result = job.refresh_from_external_source()

    assert result.outcome == PARTIAL
    assert result.errors[0].startswith("#0")
    assert rate_ledger.get_rate(db, "silver", "Standard").rate_per_gram == Decimal("80")


def test_overlapping_refresh_is_skipped(session_factory):
    feed = BlockingFeed()
    job = RateRefreshJob(feed=feed, session_factory=session_factory)
    results = {}

    worker = threading.Thread(target=lambda: results.setdefault("first", job.refresh_from_external_source()))
    worker.start()
    assert feed.entered.wait(timeout=5)
    assert job.is_running

    second = job.refresh_from_external_source()
    feed.release.set()
    worker.join(timeout=5)

    assert second.outcome == SKIPPED
    assert second.success
    assert results["first"].outcome == SUCCESS
    assert not job.is_running


def test_refresh_can_run_again_after_failure(session_factory):
    job = RateRefreshJob(feed=FailingFeed(), session_factory=session_factory)
    assert job.refresh_from_external_source().outcome == FAILED
    assert not job.is_running
    assert job.refresh_from_external_source().outcome == FAILED


def test_initialize_rates_only_on_empty_ledger(db, session_factory):
    job = RateRefreshJob(feed=StaticRateFeed(), session_factory=session_factory)

    first = job.initialize_rates(db)
    second = job.initialize_rates(db)

    assert first.outcome == SUCCESS
    assert second is None
    assert db.query(RateRecord).count() == 5


def test_http_feed_parses_rates(monkeypatch):
    calls = {}

    def fake_get(url, headers=None, timeout=None):
        calls.update(url=url, headers=headers, timeout=timeout)
        return FakeResponse({"rates": [
            {"metalType": "gold", "purity": "24K", "ratePerGram": 6512.3456},
            {"metal_type": "silver", "purity": "Standard", "rate_per_gram": "81.5"},
        ]})

    monkeypatch.setattr(requests, "get", fake_get)
    feed = HttpRateFeed("https://rates.example/api", api_key="secret", timeout=3)

    rates = feed.fetch_current_prices()

    assert rates == [
        {"metal_type": "gold", "purity": "24K", "rate_per_gram": Decimal("6512.35")},
        {"metal_type": "silver", "purity": "Standard", "rate_per_gram": Decimal("81.50")},
    ]
    assert calls["timeout"] == 3
    assert calls["headers"]["Authorization"] == "Bearer secret"


def test_http_feed_timeout(monkeypatch):
    def fake_get(url, headers=None, timeout=None):
        raise requests.Timeout("slow")

    monkeypatch.setattr(requests, "get", fake_get)

    with pytest.raises(UpstreamUnavailableError):
        HttpRateFeed("https://rates.example/api").fetch_current_prices()


def test_http_feed_error_status(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({}, status_code=503))

    with pytest.raises(UpstreamUnavailableError):
        HttpRateFeed("https://rates.example/api").fetch_current_prices()


def test_http_feed_invalid_json(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse(ValueError("not json")))

    with pytest.raises(UpstreamUnavailableError):
        HttpRateFeed("https://rates.example/api").fetch_current_prices()


@pytest.mark.parametrize(
    "payload",
    [
        {"data": []},
        [{"metal_type": "gold", "rate_per_gram": 1}],
        [{"metal_type": "gold", "purity": "24K", "rate_per_gram": "abc"}],
        ["gold"],
    ],
)
def test_malformed_payloads(payload):
    with pytest.raises(UpstreamUnavailableError):
        parse_feed_payload(payload)


def test_http_feed_failure_does_not_touch_ledger(db, session_factory, monkeypatch):
    rate_ledger.upsert_rate(db, "gold", "24K", 6400)

    def fake_get(url, headers=None, timeout=None):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", fake_get)
    job = RateRefreshJob(feed=HttpRateFeed("https://rates.example/api"), session_factory=session_factory)

    assert job.refresh_from_external_source().outcome == FAILED
    assert rate_ledger.get_rate(db, "gold", "24K").rate_per_gram == Decimal("6400")
