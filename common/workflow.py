"""Approval workflows for room-change and personal-details-update requests.

Each request moves ``pending -> approved`` or ``pending -> rejected`` exactly
once. Approval side effects (a bed transfer, or a sparse patch onto the
student's profile) commit in the same transaction as the status change, so a
failed side effect leaves the request pending.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from .accounts import ensure_phone_available
from .assignment import find_student_bed, lock_bed, transfer_bed
from .database import transaction
from .errors import AlreadyProcessed, BedOccupied, Conflict, RequestNotFound, RoomNotFound, ValidationFailed
from .models import (
    PERSONAL_DETAIL_FIELDS,
    BedStatus,
    PersonalDetailsRequest,
    RequestStatus,
    Room,
    RoomChangeRequest,
    User,
)

logger = logging.getLogger(__name__)

APPROVE = "approve"
REJECT = "reject"


def _ensure_pending(request: RoomChangeRequest | PersonalDetailsRequest) -> None:
    if request.status != RequestStatus.PENDING:
        raise AlreadyProcessed()


def _close(
    db: Session,
    request: RoomChangeRequest | PersonalDetailsRequest,
    new_status: RequestStatus,
    warden: User,
    comments: Optional[str],
) -> None:
    model = type(request)
    result = db.execute(
        update(model)
        .where(model.id == request.id, model.status == RequestStatus.PENDING)
        .values(status=new_status, processed_at=datetime.utcnow(), processed_by=warden.id, comments=comments)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise AlreadyProcessed()
    db.refresh(request)


def _load(db: Session, model: type, request_id: int) -> Any:
    request = db.get(model, request_id, populate_existing=True, with_for_update=True)
    if request is None:
        raise RequestNotFound()
    return request


# Room change requests


def submit_room_change_request(
    db: Session,
    student: User,
    requested_room_id: int,
    requested_bed_number: int,
    reason: Optional[str] = None,
) -> RoomChangeRequest:
    with transaction(db):
        if db.get(Room, requested_room_id) is None:
            raise RoomNotFound("Requested room does not exist")
        target = lock_bed(db, requested_room_id, requested_bed_number)
        if target.status != BedStatus.AVAILABLE:
            raise BedOccupied("Requested bed is not available")
        current = find_student_bed(db, student.id)
        request = RoomChangeRequest(
            student_id=student.id,
            current_room_id=current.room_id if current else None,
            current_bed_number=current.bed_number if current else None,
            requested_room_id=requested_room_id,
            requested_bed_number=requested_bed_number,
            reason=reason,
            status=RequestStatus.PENDING,
            requested_at=datetime.utcnow(),
        )
        db.add(request)
    logger.info("Student %s requested a move to room %s bed %s", student.id, requested_room_id, requested_bed_number)
    return request


def approve_room_change_request(
    db: Session, request_id: int, warden: User, comments: Optional[str] = None
) -> RoomChangeRequest:
    with transaction(db):
        request = _load(db, RoomChangeRequest, request_id)
        _ensure_pending(request)
        current = find_student_bed(db, request.student_id)
        transfer_bed(
            db,
            request.student_id,
            current.id if current else None,
            request.requested_room_id,
            request.requested_bed_number,
        )
        _close(db, request, RequestStatus.APPROVED, warden, comments)
    logger.info("Room change request %s approved by %s", request_id, warden.username)
    return request


def reject_room_change_request(
    db: Session, request_id: int, warden: User, comments: Optional[str] = None
) -> RoomChangeRequest:
    with transaction(db):
        request = _load(db, RoomChangeRequest, request_id)
        _ensure_pending(request)
        _close(db, request, RequestStatus.REJECTED, warden, comments)
    logger.info("Room change request %s rejected by %s", request_id, warden.username)
    return request


def _room_change_view(request: RoomChangeRequest) -> dict[str, Any]:
    return {
        "id": request.id,
        "student_id": request.student_id,
        "student_name": request.student.full_name if request.student else "Unknown",
        "current_room_id": request.current_room_id,
        "current_room": request.current_room.room_number if request.current_room else None,
        "current_bed_number": request.current_bed_number,
        "requested_room_id": request.requested_room_id,
        "requested_room": request.requested_room.room_number if request.requested_room else "Unknown",
        "requested_bed_number": request.requested_bed_number,
        "reason": request.reason,
        "status": request.status,
        "requested_at": request.requested_at,
        "processed_at": request.processed_at,
        "processed_by": request.processed_by,
        "comments": request.comments,
    }


def list_room_change_requests(db: Session, student_id: Optional[int] = None) -> list[dict[str, Any]]:
    query = db.query(RoomChangeRequest)
    if student_id is not None:
        query = query.filter(RoomChangeRequest.student_id == student_id)
    requests = query.order_by(RoomChangeRequest.requested_at.desc(), RoomChangeRequest.id.desc()).all()
    return [_room_change_view(request) for request in requests]


# Personal details update requests


def submit_personal_details_request(
    db: Session, student: User, changes: Mapping[str, Optional[str]]
) -> PersonalDetailsRequest:
    proposed = {field: changes.get(field) for field in PERSONAL_DETAIL_FIELDS}
    with transaction(db):
        pending = (
            db.query(PersonalDetailsRequest)
            .filter(
                PersonalDetailsRequest.student_id == student.id,
                PersonalDetailsRequest.status == RequestStatus.PENDING,
            )
            .first()
        )
        if pending is not None:
            raise Conflict(
                "You already have a pending personal details update request. "
                "Please wait for approval or contact the warden."
            )
        request = PersonalDetailsRequest(
            student_id=student.id,
            status=RequestStatus.PENDING,
            requested_at=datetime.utcnow(),
            **proposed,
        )
        db.add(request)
    logger.info("Student %s submitted a personal details update", student.id)
    return request


def _apply_patch(db: Session, student: User, request: PersonalDetailsRequest) -> list[str]:
    changed = []
    for field in PERSONAL_DETAIL_FIELDS:
        value = getattr(request, field)
        if value is None or not value.strip():
            continue
        if field == "phone":
            ensure_phone_available(db, value, owner_id=student.id)
        setattr(student, field, value)
        changed.append(field)
    return changed


def approve_personal_details_request(
    db: Session, request_id: int, warden: User, comments: Optional[str] = None
) -> PersonalDetailsRequest:
    with transaction(db):
        request = _load(db, PersonalDetailsRequest, request_id)
        _ensure_pending(request)
        changed = _apply_patch(db, request.student, request)
        _close(db, request, RequestStatus.APPROVED, warden, comments)
    logger.info("Personal details request %s approved by %s, updated %s", request_id, warden.username, changed)
    return request


def reject_personal_details_request(
    db: Session, request_id: int, warden: User, comments: Optional[str] = None
) -> PersonalDetailsRequest:
    with transaction(db):
        request = _load(db, PersonalDetailsRequest, request_id)
        _ensure_pending(request)
        _close(db, request, RequestStatus.REJECTED, warden, comments)
    logger.info("Personal details request %s rejected by %s", request_id, warden.username)
    return request


def _personal_details_view(request: PersonalDetailsRequest) -> dict[str, Any]:
    view = {field: getattr(request, field) for field in PERSONAL_DETAIL_FIELDS}
    view.update(
        {
            "id": request.id,
            "student_id": request.student_id,
            "student_name": request.student.full_name if request.student else "Unknown",
            "roll_no": request.student.roll_no if request.student else None,
            "status": request.status,
            "requested_at": request.requested_at,
            "processed_at": request.processed_at,
            "processed_by": request.processed_by,
            "comments": request.comments,
        }
    )
    return view


def list_personal_details_requests(db: Session, student_id: Optional[int] = None) -> list[dict[str, Any]]:
    query = db.query(PersonalDetailsRequest)
    if student_id is not None:
        query = query.filter(PersonalDetailsRequest.student_id == student_id)
    requests = query.order_by(PersonalDetailsRequest.requested_at.desc(), PersonalDetailsRequest.id.desc()).all()
    return [_personal_details_view(request) for request in requests]


def list_my_requests(db: Session, student: User) -> dict[str, list[dict[str, Any]]]:
    return {
        "room_change_requests": list_room_change_requests(db, student_id=student.id),
        "personal_details_requests": list_personal_details_requests(db, student_id=student.id),
    }


_ACTIONS: dict[str, dict[str, Callable[..., Any]]] = {
    "room_change": {APPROVE: approve_room_change_request, REJECT: reject_room_change_request},
    "personal_details": {APPROVE: approve_personal_details_request, REJECT: reject_personal_details_request},
}


def process_request(
    db: Session, kind: str, request_id: int, action: str, warden: User, comments: Optional[str] = None
) -> Any:
    """Dispatch the ``approve``/``reject`` path segment to the matching transition."""

    handler = _ACTIONS[kind].get(action)
    if handler is None:
        raise ValidationFailed(f"Unknown action '{action}', expected '{APPROVE}' or '{REJECT}'")
    return handler(db, request_id, warden, comments)
