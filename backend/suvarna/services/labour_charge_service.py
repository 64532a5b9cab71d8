from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError, field_validator
from sqlalchemy.orm import Session

from suvarna.core.errors import NotFoundError, ValidationError, from_pydantic
from suvarna.core.metals import ChargeType
from suvarna.core.money import positive_money
from suvarna.models.labour_charge import LabourCharge

logger = logging.getLogger(__name__)


def _positive_amount(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return value
    return positive_money(value, field="amount")


class LabourChargeCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    charge_type: ChargeType
    amount: Decimal
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _positive_amount(value)


class LabourChargeUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = None
    charge_type: Optional[ChargeType] = None
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _positive_amount(value)


def list_active_labour_charges(db: Session) -> List[LabourCharge]:
    """Charges offered on new invoices"""
    return (
        db.query(LabourCharge)
        .filter(LabourCharge.is_active.is_(True))
        .order_by(LabourCharge.name)
        .all()
    )


def get_labour_charge(db: Session, charge_id: int) -> LabourCharge:
    """Fetch by id regardless of is_active, so historical invoices still resolve"""
    charge = db.query(LabourCharge).filter(LabourCharge.id == charge_id).first()
    if charge is None:
        raise NotFoundError(f"Labour charge {charge_id} not found")
    return charge


def create_labour_charge(
    db: Session,
    name: str,
    charge_type: Any,
    amount: Any,
    description: Optional[str] = None,
) -> LabourCharge:
    try:
        data = LabourChargeCreate(name=name, charge_type=charge_type, amount=amount, description=description)
    except PydanticValidationError as exc:
        raise from_pydantic(exc) from exc

    charge = LabourCharge(
        name=data.name,
        charge_type=data.charge_type.value,
        amount=data.amount,
        description=data.description,
        is_active=True,
    )
    db.add(charge)
    db.commit()
    db.refresh(charge)
    logger.info("labour charge created id=%s name=%s", charge.id, charge.name)
    return charge


def update_labour_charge(db: Session, charge_id: int, **fields: Any) -> LabourCharge:
    try:
        data = LabourChargeUpdate(**fields)
    except PydanticValidationError as exc:
        raise from_pydantic(exc) from exc
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("At least one field must be provided")
    if "name" in changes and not changes["name"]:
        raise ValidationError("name must not be empty", field="name")
    for key in ("name", "charge_type", "amount", "is_active"):
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} must not be null", field=key)

    charge = get_labour_charge(db, charge_id)
    for key, value in changes.items():
        if isinstance(value, ChargeType):
            value = value.value
        setattr(charge, key, value)
    db.commit()
    db.refresh(charge)
    return charge


def deactivate_labour_charge(db: Session, charge_id: int) -> LabourCharge:
    """Soft delete"""
    charge = get_labour_charge(db, charge_id)
    charge.is_active = False
    db.commit()
    db.refresh(charge)
    logger.info("labour charge deactivated id=%s", charge.id)
    return charge
