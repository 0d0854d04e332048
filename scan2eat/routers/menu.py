from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from scan2eat.core.database import get_db
from scan2eat.deps import get_broadcaster, require_role
from scan2eat.schemas.menu import MenuItemAvailability, MenuItemCreate, MenuItemOut, menu_item_to_dict
from scan2eat.services.access import CASHIER_ONLY, Role
from scan2eat.services.live_updates import LiveUpdateBroadcaster
from scan2eat.services.menu import create_menu_item, list_all_menu, list_public_menu, set_menu_item_availability
from scan2eat.services.order_events import emit_menu_changed

router = APIRouter(prefix="/api", tags=["menu"])


@router.get("/menu", response_model=List[MenuItemOut])
def list_public_menu_route(db: Session = Depends(get_db)):
    return [menu_item_to_dict(item) for item in list_public_menu(db)]


@router.get("/menu/all", response_model=List[MenuItemOut])
def list_all_menu_route(
    db: Session = Depends(get_db),
    _role: Role = Depends(require_role(CASHIER_ONLY)),
):
    return [menu_item_to_dict(item) for item in list_all_menu(db)]


@router.post("/menu", response_model=MenuItemOut, status_code=201)
def create_menu_item_route(
    payload: MenuItemCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    broadcaster: LiveUpdateBroadcaster = Depends(get_broadcaster),
    _role: Role = Depends(require_role(CASHIER_ONLY)),
):
    item = create_menu_item(
        db,
        name=payload.name,
        price=payload.price,
        description=payload.description,
        image_url=payload.image_url,
        available=payload.available,
    )
    background_tasks.add_task(emit_menu_changed, broadcaster)
    return menu_item_to_dict(item)


@router.patch("/menu/{item_id}", response_model=MenuItemOut)
def set_menu_item_availability_route(
    item_id: int,
    payload: MenuItemAvailability,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    broadcaster: LiveUpdateBroadcaster = Depends(get_broadcaster),
    _role: Role = Depends(require_role(CASHIER_ONLY)),
):
    item = set_menu_item_availability(db, item_id, payload.available)
    background_tasks.add_task(emit_menu_changed, broadcaster)
    return menu_item_to_dict(item)
