"""
Status transition handler for queue entries.
"""

import logging
from typing import Optional

from carequeue.core.clock import Clock, system_clock
from carequeue.core.exceptions import (
    Conflict,
    InvalidStatus,
    InvalidTransition,
    MissingParameter,
    NotFound,
    StorageUnavailable,
)
from carequeue.core.logging import audit_logger
from carequeue.models.queue import QueueRules, parse_status
from carequeue.repositories.queue_repository import STORAGE_ERRORS, QueueRepository

logger = logging.getLogger(__name__)


class StatusTransitionHandler:
    """Validates and applies a status change to one appointment."""

    def __init__(self, repository: QueueRepository, clock: Clock = system_clock):
        self.repository = repository
        self.clock = clock

    async def apply(
        self,
        appointment_id: Optional[str],
        status: Optional[str],
        notes: Optional[str] = None,
        expected_status: Optional[str] = None,
    ) -> bool:
        """Apply ``status`` to the appointment.

        Returns True when a write happened and False for an idempotent no-op.
        """
        if not appointment_id or not status:
            audit_logger.log_rejected("status_change", "missing_parameter", {"appointment_id": appointment_id})
            raise MissingParameter("Missing appointmentId or status")

        target = parse_status(status)
        if target is None:
            audit_logger.log_rejected("status_change", "invalid_status", {"appointment_id": appointment_id, "status": status})
            raise InvalidStatus(f"Invalid status: {status}")

        if expected_status is not None and parse_status(expected_status) is None:
            raise InvalidStatus(f"Invalid expected status: {expected_status}")

        try:
            current_value = await self.repository.find_status(appointment_id)
        except STORAGE_ERRORS as e:
            logger.error(f"Error reading status for {appointment_id}: {str(e)}")
            raise StorageUnavailable("Failed to update queue status")

        if current_value is None:
            raise NotFound(f"Appointment {appointment_id} not found", appointment_id=appointment_id)

        if expected_status is not None and current_value != expected_status:
            audit_logger.log_rejected(
                "status_change", "conflict",
                {"appointment_id": appointment_id, "expected": expected_status, "actual": current_value}
            )
            raise Conflict(
                f"Appointment {appointment_id} is {current_value}, expected {expected_status}",
                appointment_id=appointment_id, current=current_value,
            )

        if current_value == target.value:
            audit_logger.log_status_change(appointment_id, current_value, target.value, applied=False)
            return False

        current = parse_status(current_value)
        if current is None or not QueueRules.can_transition(current, target):
            reason = "terminal_status" if current is not None and QueueRules.is_terminal(current) else "invalid_transition"
            audit_logger.log_rejected(
                "status_change", reason,
                {"appointment_id": appointment_id, "from": current_value, "to": target.value}
            )
            raise InvalidTransition(
                f"Cannot change status from {current_value} to {target.value}",
                appointment_id=appointment_id, current=current_value, reason=reason,
            )

        try:
            affected = await self.repository.update_status(
                appointment_id,
                target.value,
                notes,
                expected_current=current_value,
                now=self.clock.now(),
            )
        except STORAGE_ERRORS as e:
            logger.error(f"Error updating status for {appointment_id}: {str(e)}")
            raise StorageUnavailable("Failed to update queue status")

        if affected == 0:
            # Status moved on between the read and the conditional update
            raise Conflict(f"Appointment {appointment_id} was modified concurrently", appointment_id=appointment_id)

        audit_logger.log_status_change(
            appointment_id, current_value, target.value, applied=True,
            details={"notes_replaced": notes is not None}
        )
        return True
