from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scan2eat.core.database import MAX_INTEGER_VALUE
from scan2eat.core.errors import InvalidTransitionError, NotFoundError, StoreError, ValidationError
from scan2eat.models.order import ORDER_STATUSES, Order
from scan2eat.schemas.orders import LineItemIn

logger = logging.getLogger(__name__)

# forward-only, one step at a time
ORDER_TRANSITIONS = {
    "pending": "cooking",
    "cooking": "ready",
    "ready": "completed",
}


def normalize_status(status: Any) -> str:
    if not isinstance(status, str) or status not in ORDER_STATUSES:
        raise ValidationError("Invalid status")
    return status


def compute_total(items: Sequence[LineItemIn]) -> float:
    total = sum(item.price * item.qty for item in items)
    if not math.isfinite(total):
        raise ValidationError("Invalid order: total is out of range")
    return round(total, 2)


def _snapshot_items(items: Sequence[LineItemIn]) -> List[Dict[str, Any]]:
    return [
        {"name": item.name, "qty": item.qty, "price": item.price, "note": item.note}
        for item in items
    ]


def _commit(db: Session, obj: Any, *, action: str) -> None:
    try:
        db.commit()
        db.refresh(obj)
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(f"Failed to {action}") from exc


def create_order(db: Session, *, table_id: Any, items: Sequence[LineItemIn]) -> Order:
    if isinstance(table_id, bool) or not isinstance(table_id, int):
        raise ValidationError("Invalid order: tableId must be an integer")
    if not -MAX_INTEGER_VALUE - 1 <= table_id <= MAX_INTEGER_VALUE:
        raise ValidationError("Invalid order: tableId is out of range")
    if not items:
        raise ValidationError("Invalid order: items must not be empty")

    total = compute_total(items)
    order = Order(
        table_id=table_id,
        items=_snapshot_items(items),
        total=total,
        status="pending",
        paid=False,
    )
    db.add(order)
    _commit(db, order, action="create order")
    logger.info("order created id=%s table_id=%s total=%s", order.id, order.table_id, order.total)
    return order


def list_orders(db: Session, status: Optional[str] = None) -> List[Order]:
    query = db.query(Order)
    if status is not None:
        query = query.filter(Order.status == normalize_status(status))
    try:
        return query.order_by(Order.created_at.asc(), Order.id.asc()).all()
    except SQLAlchemyError as exc:
        raise StoreError("Failed to list orders") from exc


def get_order(db: Session, order_id: int) -> Order:
    if not 0 < order_id <= MAX_INTEGER_VALUE:
        raise NotFoundError("Order not found")
    try:
        order = db.query(Order).filter(Order.id == order_id).first()
    except SQLAlchemyError as exc:
        raise StoreError("Failed to load order") from exc
    if not order:
        raise NotFoundError("Order not found")
    return order


def update_order_status(db: Session, order_id: int, new_status: Any) -> Tuple[Order, bool]:
    """Moves the order one step forward.

    Returns the order and whether anything was written; re-sending the
    current status is a no-op.
    """
    status = normalize_status(new_status)
    order = get_order(db, order_id)

    current = order.status
    if current == status:
        return order, False
    if ORDER_TRANSITIONS.get(current) != status:
        raise InvalidTransitionError(f"Cannot move order from {current} to {status}")

    order.status = status
    _commit(db, order, action="update order status")
    logger.info("order status changed id=%s %s->%s", order.id, current, status)
    return order, True


def set_order_paid(db: Session, order_id: int, paid: bool) -> Tuple[Order, bool]:
    order = get_order(db, order_id)
    if bool(order.paid) == paid:
        return order, False

    order.paid = paid
    _commit(db, order, action="update order payment")
    logger.info("order payment changed id=%s paid=%s", order.id, paid)
    return order, True


def _start_of_local_day(now: Optional[datetime] = None) -> datetime:
    local_now = (now or datetime.now(timezone.utc)).astimezone()
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)


def sales_summary(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    start = _start_of_local_day(now)
    try:
        total_orders, total_revenue = (
            db.query(func.count(Order.id), func.coalesce(func.sum(Order.total), 0.0))
            .filter(Order.status == "completed", Order.created_at >= start)
            .one()
        )
    except SQLAlchemyError as exc:
        raise StoreError("Failed to compute sales summary") from exc
    return {
        "totalOrders": int(total_orders or 0),
        "totalRevenue": round(float(total_revenue or 0), 2),
    }
