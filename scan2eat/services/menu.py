from __future__ import annotations

import logging
import math
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scan2eat.core.config import MENU_ITEM_DEFAULT_AVAILABLE
from scan2eat.core.database import MAX_INTEGER_VALUE
from scan2eat.core.errors import NotFoundError, StoreError, ValidationError
from scan2eat.models.menu_item import MenuItem

logger = logging.getLogger(__name__)


def _build_menu_query(db: Session, *, only_available: bool):
    query = db.query(MenuItem)
    if only_available:
        query = query.filter(MenuItem.available.is_(True))
    return query.order_by(MenuItem.created_at.asc(), MenuItem.id.asc())


def list_public_menu(db: Session) -> List[MenuItem]:
    try:
        return _build_menu_query(db, only_available=True).all()
    except SQLAlchemyError as exc:
        raise StoreError("Failed to list menu") from exc


def list_all_menu(db: Session) -> List[MenuItem]:
    try:
        return _build_menu_query(db, only_available=False).all()
    except SQLAlchemyError as exc:
        raise StoreError("Failed to list menu") from exc


def create_menu_item(
    db: Session,
    *,
    name: str,
    price: float,
    description: Optional[str] = None,
    image_url: Optional[str] = None,
    available: Optional[bool] = None,
) -> MenuItem:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Invalid menu item: name is required")
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise ValidationError("Invalid menu item: price must be a number >= 0")
    if not math.isfinite(price) or price < 0:
        raise ValidationError("Invalid menu item: price must be a number >= 0")

    item = MenuItem(
        name=name.strip(),
        price=float(price),
        description=description,
        image_url=image_url,
        available=MENU_ITEM_DEFAULT_AVAILABLE if available is None else available,
    )
    db.add(item)
    try:
        db.commit()
        db.refresh(item)
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError("Failed to create menu item") from exc
    logger.info("menu item created id=%s available=%s", item.id, item.available)
    return item


def set_menu_item_availability(db: Session, item_id: int, available: bool) -> MenuItem:
    if not 0 < item_id <= MAX_INTEGER_VALUE:
        raise NotFoundError("Menu item not found")
    try:
        item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
    except SQLAlchemyError as exc:
        raise StoreError("Failed to load menu item") from exc
    if not item:
        raise NotFoundError("Menu item not found")

    item.available = available
    try:
        db.commit()
        db.refresh(item)
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError("Failed to update menu item") from exc
    logger.info("menu item availability changed id=%s available=%s", item.id, available)
    return item
