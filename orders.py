"""
Order acceptance and status transitions.
"""

import logging
from typing import Any, Dict, List, Optional

import pydantic

from auth import require_role
from database import Storage
from errors import Unauthorized, ValidationError
from pricing import compute_total
from schemas import ORDER_STATUSES, STAFF_ROLES, Order, OrderCreate, User

logger = logging.getLogger(__name__)


def _format_errors(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def submit_order(storage: Storage, payload: Dict[str, Any], customer_id: Optional[int]) -> Order:
    if customer_id is None:
        raise Unauthorized()
    if not isinstance(payload, dict):
        raise ValidationError("Order payload must be an object")
    try:
        draft = OrderCreate.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(_format_errors(e)) from e

    service = storage.get_service(draft.service_id)
    if service is None:
        raise ValidationError(f"Unknown service: {draft.service_id}")

    total = compute_total(service, draft.complexity, draft.delivery_time, draft.files)
    if draft.total_price is not None and round(draft.total_price, 2) != total:
        logger.warning(
            "Ignoring client total %.2f for customer %s, computed %.2f",
            draft.total_price, customer_id, total,
        )

    fields = draft.model_dump(exclude={"total_price"})
    fields.update(customer_id=customer_id, total_price=total)
    order = storage.create_order(fields)
    logger.info("Order %s created by customer %s, total %.2f", order.id, customer_id, total)
    return order


def list_orders(storage: Storage, caller: Optional[User]) -> List[Order]:
    if caller is None:
        raise Unauthorized()
    if caller.role in STAFF_ROLES:
        return storage.get_orders()
    return storage.get_orders(caller.id)


def set_order_status(storage: Storage, order_id: int, status: str, caller_role: Optional[str]) -> Order:
    """Any status may be set from any other; only staff may do it."""
    require_role(caller_role, *STAFF_ROLES)
    if status not in ORDER_STATUSES:
        raise ValidationError(f"Invalid status: {status}")
    order = storage.update_order_status(order_id, status)
    logger.info("Order %s set to %s by %s", order_id, status, caller_role)
    return order
