# Overview: Service-layer operations for order lifecycle; enforces the forward-only status sequence.

"""
Order lifecycle.

STATE MACHINE (strictly forward, one step at a time):
    DRAFT -> PENDING -> CONFIRMED -> IN_PREPARATION -> SHIPPED -> DELIVERED

    CANCELLED is reachable from every non-terminal state.
    DELIVERED and CANCELLED are terminal.

PENDING, CONFIRMED and IN_PREPARATION are "in flight": they feed the
pending-orders figure used for operational alerts.
"""

from __future__ import annotations

from typing import Literal

from ..extensions import db
from ..models import Order
from .concurrency import run_with_retry

ORDER_SEQUENCE = ("DRAFT", "PENDING", "CONFIRMED", "IN_PREPARATION", "SHIPPED", "DELIVERED")
CANCELLED = "CANCELLED"
VALID_STATUSES = set(ORDER_SEQUENCE) | {CANCELLED}
TERMINAL_STATUSES = {"DELIVERED", CANCELLED}
IN_FLIGHT_STATUSES = ("PENDING", "CONFIRMED", "IN_PREPARATION")

OrderStatus = Literal["DRAFT", "PENDING", "CONFIRMED", "IN_PREPARATION", "SHIPPED", "DELIVERED", "CANCELLED"]


class OrderTransitionError(ValueError):
    """Raised when an order status change violates the lifecycle."""


def validate_status(status: str) -> None:
    if status not in VALID_STATUSES:
        raise OrderTransitionError(
            f"Invalid status '{status}'. Must be one of: {', '.join(sorted(VALID_STATUSES))}"
        )


def can_transition(from_status: str, to_status: str) -> bool:
    """
    Check a status change against the lifecycle.

    Same-state moves are rejected; the caller decides whether a repeat
    request is a no-op.
    """
    validate_status(from_status)
    validate_status(to_status)

    if from_status in TERMINAL_STATUSES or from_status == to_status:
        return False
    if to_status == CANCELLED:
        return True
    return ORDER_SEQUENCE.index(to_status) == ORDER_SEQUENCE.index(from_status) + 1


def is_in_flight(status: str) -> bool:
    return status in IN_FLIGHT_STATUSES


def advance_order(order_id: int, to_status: OrderStatus) -> Order:
    """
    Move an order to its next status (or cancel it).

    Raises:
        ValueError: order not found
        OrderTransitionError: transition not allowed
    """
    def _op():
        order = db.session.get(Order, order_id)
        if order is None:
            raise ValueError("Order not found")
        if not can_transition(order.status, to_status):
            raise OrderTransitionError(
                f"Cannot move order {order.order_number} from {order.status} to {to_status}"
            )
        order.status = to_status
        db.session.commit()
        return order

    return run_with_retry(_op)
