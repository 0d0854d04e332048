from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from scan2eat.core.database import MAX_INTEGER_VALUE
from scan2eat.models.order import Order


def _reject_non_numeric(value: Any) -> Any:
    # bool is an int subclass and numeric strings would be coerced in lax mode
    if isinstance(value, (bool, str)) or value is None:
        raise ValueError("must be a number")
    return value


class LineItemIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    price: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("price", "unitPrice"),
    )
    qty: StrictInt = Field(
        ...,
        ge=1,
        le=MAX_INTEGER_VALUE,
        validation_alias=AliasChoices("qty", "quantity"),
    )
    note: Optional[str] = Field(default=None, max_length=100)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("price", mode="before")
    @classmethod
    def _price_is_number(cls, value: Any) -> Any:
        return _reject_non_numeric(value)


class OrderCreate(BaseModel):
    table_id: StrictInt = Field(
        ...,
        ge=-MAX_INTEGER_VALUE - 1,
        le=MAX_INTEGER_VALUE,
        validation_alias=AliasChoices("tableId", "table_id"),
    )
    items: List[LineItemIn] = Field(..., min_length=1)


class StatusUpdate(BaseModel):
    status: str


class PaymentUpdate(BaseModel):
    paid: StrictBool


class LineItemOut(BaseModel):
    name: str
    qty: int
    price: float
    note: Optional[str] = None


class OrderOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    table_id: int
    items: List[LineItemOut]
    total: float
    status: str
    paid: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class SalesSummaryOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_orders: int
    total_revenue: float


def order_to_dict(order: Order) -> Dict[str, Any]:
    return {
        "id": order.id,
        "tableId": order.table_id,
        "items": list(order.items or []),
        "total": order.total,
        "status": order.status,
        "paid": bool(order.paid),
        "createdAt": order.created_at.isoformat() if order.created_at else None,
        "updatedAt": order.updated_at.isoformat() if order.updated_at else None,
    }
