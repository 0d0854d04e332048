from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

from scan2eat.models.menu_item import MenuItem


class MenuItemOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    price: float
    description: Optional[str] = None
    image_url: Optional[str] = None
    available: bool
    created_at: Optional[str] = None


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    description: Optional[str] = None
    image_url: Optional[str] = Field(
        default=None,
        max_length=500,
        validation_alias=AliasChoices("imageUrl", "image_url"),
    )
    available: Optional[StrictBool] = None

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
        if isinstance(value, (bool, str)) or value is None:
            raise ValueError("must be a number")
        return value


class MenuItemAvailability(BaseModel):
    available: StrictBool


def menu_item_to_dict(item: MenuItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "price": item.price,
        "description": item.description,
        "imageUrl": item.image_url,
        "available": bool(item.available),
        "createdAt": item.created_at.isoformat() if item.created_at else None,
    }
