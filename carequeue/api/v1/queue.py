"""
Reception queue endpoints: today's queue, status changes and walk-in admission.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from carequeue.core.clock import Clock, get_clock
from carequeue.core.logging import get_logger
from carequeue.db.session import get_db_session
from carequeue.repositories.queue_repository import QueueRepository
from carequeue.schemas.queue import (
    MessageResponse,
    QueueResponse,
    StatusUpdateRequest,
    WalkInRequest,
    WalkInResponse,
)
from carequeue.services.queue_assembler import QueueAssembler
from carequeue.services.status_transitions import StatusTransitionHandler
from carequeue.services.walk_in import WalkInAdmissionHandler

logger = get_logger(__name__)

router = APIRouter()


def get_queue_repository(db: AsyncSession = Depends(get_db_session)) -> QueueRepository:
    return QueueRepository(db)


@router.get("/queue", response_model=QueueResponse)
async def get_queue(
    repository: QueueRepository = Depends(get_queue_repository),
    clock: Clock = Depends(get_clock),
):
    """Today's queue ordered for the reception desk, with doctor availability and counters."""
    return await QueueAssembler(repository, clock).assemble()


@router.put("/queue", response_model=MessageResponse)
async def update_queue_status(
    request_data: StatusUpdateRequest,
    repository: QueueRepository = Depends(get_queue_repository),
    clock: Clock = Depends(get_clock),
):
    """Change the status of one queue entry."""
    await StatusTransitionHandler(repository, clock).apply(
        request_data.appointment_id,
        request_data.status,
        notes=request_data.notes,
        expected_status=request_data.expected_status,
    )
    return MessageResponse(message="Queue status updated successfully")


@router.post("/queue", response_model=WalkInResponse, status_code=status.HTTP_201_CREATED)
async def add_walk_in(
    request_data: WalkInRequest,
    repository: QueueRepository = Depends(get_queue_repository),
    clock: Clock = Depends(get_clock),
):
    """Add a walk-in patient to today's queue."""
    appointment_id = await WalkInAdmissionHandler(repository, clock).admit(
        request_data.patient_id,
        request_data.doctor_id,
        priority=request_data.priority,
        notes=request_data.notes,
    )
    return WalkInResponse(message="Patient added to queue successfully", appointment_id=appointment_id)
