"""Room and bed assignment.

A bed holds at most one student: ``status == occupied`` exactly when
``student_id`` is set. Occupancy counts are never stored on the room; they are
derived from the beds on every read. Writes run inside
:func:`common.database.transaction`, and a bed is only ever claimed by a
conditional UPDATE on its ``available`` status, so the database rejects a
second claim even from another process.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from .database import transaction
from .errors import BedNotFound, BedOccupied, Conflict, NotFound, RoomNotFound, StudentNotFound
from .models import Bed, BedStatus, RoleEnum, Room, User

logger = logging.getLogger(__name__)


def _room_fields(room: Room) -> dict[str, Any]:
    return {
        "id": room.id,
        "room_number": room.room_number,
        "floor": room.floor,
        "capacity": room.capacity,
        "room_type": room.room_type,
        "created_at": room.created_at,
    }


def _get_room(db: Session, room_id: int) -> Room:
    room = db.get(Room, room_id)
    if room is None:
        raise RoomNotFound()
    return room


def _get_student(db: Session, student_id: int) -> User:
    student = db.get(User, student_id)
    if student is None or student.role != RoleEnum.STUDENT:
        raise StudentNotFound()
    return student


def lock_bed(db: Session, room_id: int, bed_number: int) -> Bed:
    """Load a bed for update, bypassing any stale copy held by the session."""

    bed = (
        db.query(Bed)
        .filter(Bed.room_id == room_id, Bed.bed_number == bed_number)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if bed is None:
        raise BedNotFound(f"Bed {bed_number} does not exist in room {room_id}")
    return bed


def occupy_bed(db: Session, bed: Bed, student_id: int) -> None:
    """Claim ``bed`` for ``student_id`` only if the database still has it available.

    The status test lives in the UPDATE itself, so a second writer holding a
    stale copy of the bed (another service process, another session) matches
    no row and gets :class:`BedOccupied` instead of overwriting the occupant.
    """

    result = db.execute(
        update(Bed)
        .where(Bed.id == bed.id, Bed.status == BedStatus.AVAILABLE)
        .values(student_id=student_id, status=BedStatus.OCCUPIED)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise BedOccupied()
    db.refresh(bed)


def _vacate(db: Session, bed: Bed, student_id: int) -> None:
    db.execute(
        update(Bed)
        .where(Bed.id == bed.id, Bed.student_id == student_id)
        .values(student_id=None, status=BedStatus.AVAILABLE)
        .execution_options(synchronize_session=False)
    )
    db.refresh(bed)


def create_room(db: Session, room_number: str, floor: int, capacity: int, room_type: str = "standard") -> Room:
    """Create a room together with ``capacity`` available beds numbered from 1."""

    with transaction(db):
        if db.query(Room).filter(Room.room_number == room_number).first():
            raise Conflict(f"Room {room_number} already exists")
        room = Room(room_number=room_number, floor=floor, capacity=capacity, room_type=room_type)
        room.beds = [Bed(bed_number=number, status=BedStatus.AVAILABLE) for number in range(1, capacity + 1)]
        db.add(room)
    logger.info("Created room %s with %d beds", room_number, capacity)
    return room


def list_rooms_with_occupancy(db: Session) -> list[dict[str, Any]]:
    rooms = db.query(Room).options(selectinload(Room.beds)).order_by(Room.room_number).all()
    result = []
    for room in rooms:
        occupied = sum(1 for bed in room.beds if bed.status == BedStatus.OCCUPIED)
        available = sum(1 for bed in room.beds if bed.status == BedStatus.AVAILABLE)
        result.append({**_room_fields(room), "occupied_beds": occupied, "available_beds": available})
    return result


def get_room_detail(db: Session, room_id: int) -> dict[str, Any]:
    room = _get_room(db, room_id)
    beds = [
        {
            "id": bed.id,
            "room_id": bed.room_id,
            "bed_number": bed.bed_number,
            "status": bed.status,
            "student_id": bed.student_id,
            "student_name": bed.student.full_name if bed.student else None,
        }
        for bed in room.beds
    ]
    return {**_room_fields(room), "beds": beds}


def assign_bed(db: Session, student_id: int, room_id: int, bed_number: int) -> Bed:
    """Put a student in a free bed.

    Any bed the student already holds is left as it is; only
    :func:`transfer_bed` moves a student out of their previous bed.
    """

    with transaction(db):
        _get_student(db, student_id)
        bed = lock_bed(db, room_id, bed_number)
        if bed.status != BedStatus.AVAILABLE:
            logger.warning("Refused assignment of student %s to occupied bed %s/%s", student_id, room_id, bed_number)
            raise BedOccupied()
        occupy_bed(db, bed, student_id)
    logger.info("Assigned student %s to room %s bed %s", student_id, room_id, bed_number)
    return bed


def transfer_bed(
    db: Session,
    student_id: int,
    from_bed_id: Optional[int],
    to_room_id: int,
    to_bed_number: int,
) -> Bed:
    """Move a student to a free bed, vacating ``from_bed_id`` in the same commit."""

    with transaction(db):
        target = lock_bed(db, to_room_id, to_bed_number)
        if target.status != BedStatus.AVAILABLE:
            logger.warning("Refused transfer of student %s to occupied bed %s/%s", student_id, to_room_id, to_bed_number)
            raise BedOccupied("Requested bed is no longer available")
        if from_bed_id is not None:
            source = db.get(Bed, from_bed_id, populate_existing=True, with_for_update=True)
            if source is not None and source.student_id == student_id:
                _vacate(db, source, student_id)
        occupy_bed(db, target, student_id)
    logger.info("Transferred student %s from bed %s to room %s bed %s", student_id, from_bed_id, to_room_id, to_bed_number)
    return target


def find_student_bed(db: Session, student_id: int) -> Optional[Bed]:
    return db.query(Bed).filter(Bed.student_id == student_id).order_by(Bed.id).first()


def get_student_room(db: Session, student_id: int) -> dict[str, Any]:
    bed = find_student_bed(db, student_id)
    if bed is None:
        raise NotFound("No room assigned")
    room = bed.room
    roommates = [
        {"full_name": other.student.full_name if other.student else "Unknown"}
        for other in room.beds
        if other.student_id is not None and other.student_id != student_id
    ]
    return {**_room_fields(room), "bed_number": bed.bed_number, "roommates": roommates}
