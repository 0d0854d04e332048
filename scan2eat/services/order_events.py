from __future__ import annotations

import logging
from typing import Any, Dict

from scan2eat.services.live_updates import (
    EVENT_MENU_CHANGED,
    EVENT_ORDER_CREATED,
    EVENT_ORDER_UPDATED,
    EVENT_PAYMENT_UPDATED,
    LiveUpdateBroadcaster,
)

logger = logging.getLogger(__name__)


async def _publish(broadcaster: LiveUpdateBroadcaster, event_name: str, payload: Any = None) -> None:
    # runs after the response was sent; a failure here must stay here
    try:
        await broadcaster.publish(event_name, payload)
    except Exception:
        logger.exception("broadcast failed for %s", event_name)


def build_payment_payload(order_payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "orderId": order_payload["id"],
        "status": order_payload["status"],
        "paid": order_payload["paid"],
    }


async def emit_order_created(broadcaster: LiveUpdateBroadcaster, order_payload: Dict[str, Any]) -> None:
    await _publish(broadcaster, EVENT_ORDER_CREATED, order_payload)


async def emit_order_status_changed(broadcaster: LiveUpdateBroadcaster, order_payload: Dict[str, Any]) -> None:
    await _publish(broadcaster, EVENT_ORDER_UPDATED, order_payload)


async def emit_payment_updated(broadcaster: LiveUpdateBroadcaster, order_payload: Dict[str, Any]) -> None:
    await _publish(broadcaster, EVENT_PAYMENT_UPDATED, build_payment_payload(order_payload))


async def emit_menu_changed(broadcaster: LiveUpdateBroadcaster) -> None:
    await _publish(broadcaster, EVENT_MENU_CHANGED)
