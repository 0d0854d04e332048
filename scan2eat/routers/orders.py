from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from scan2eat.core.database import get_db
from scan2eat.deps import get_broadcaster, require_role
from scan2eat.schemas.orders import OrderCreate, OrderOut, PaymentUpdate, StatusUpdate, order_to_dict
from scan2eat.services.access import CASHIER_ONLY, STAFF_ROLES, Role
from scan2eat.services.live_updates import LiveUpdateBroadcaster
from scan2eat.services.order_events import emit_order_created, emit_order_status_changed, emit_payment_updated
from scan2eat.services.orders import create_order, list_orders, set_order_paid, update_order_status

router = APIRouter(prefix="/api", tags=["orders"])


@router.post("/orders", response_model=OrderOut, status_code=201)
def create_order_route(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    broadcaster: LiveUpdateBroadcaster = Depends(get_broadcaster),
):
    order = create_order(db, table_id=payload.table_id, items=payload.items)
    data = order_to_dict(order)
    background_tasks.add_task(emit_order_created, broadcaster, data)
    return data


@router.get("/orders", response_model=List[OrderOut])
def list_orders_route(
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return [order_to_dict(order) for order in list_orders(db, status=status)]


@router.patch("/orders/{order_id}", response_model=OrderOut)
def update_order_status_route(
    order_id: int,
    body: StatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    broadcaster: LiveUpdateBroadcaster = Depends(get_broadcaster),
    _role: Role = Depends(require_role(STAFF_ROLES)),
):
    order, changed = update_order_status(db, order_id, body.status)
    data = order_to_dict(order)
    if changed:
        background_tasks.add_task(emit_order_status_changed, broadcaster, data)
    return data


@router.patch("/orders/{order_id}/payment", response_model=OrderOut)
def update_order_payment_route(
    order_id: int,
    body: PaymentUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    broadcaster: LiveUpdateBroadcaster = Depends(get_broadcaster),
    _role: Role = Depends(require_role(CASHIER_ONLY)),
):
    order, changed = set_order_paid(db, order_id, body.paid)
    data = order_to_dict(order)
    if changed:
        background_tasks.add_task(emit_payment_updated, broadcaster, data)
    return data
