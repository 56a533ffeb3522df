"""Student accounts, password changes and the warden contact card."""
from __future__ import annotations

import logging
import secrets
import string
from typing import Any, Optional

from sqlalchemy.orm import Session

from .auth import get_password_hash, verify_password
from .config import Settings
from .database import transaction
from .errors import DuplicateUser, NotFound, ValidationFailed
from .models import Bed, RoleEnum, User
from .schemas import StudentCreate

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits
GENERATED_PASSWORD_LENGTH = 8
MIN_PASSWORD_LENGTH = 6


def generate_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def ensure_phone_available(db: Session, phone: str, owner_id: Optional[int] = None) -> None:
    """Raise :class:`DuplicateUser` if another user already has ``phone``."""

    query = db.query(User).filter(User.phone == phone)
    if owner_id is not None:
        query = query.filter(User.id != owner_id)
    if query.first():
        raise DuplicateUser("Phone number already exists")


def _ensure_unique(db: Session, payload: StudentCreate) -> None:
    taken = db.query(User).filter((User.username == payload.roll_no) | (User.roll_no == payload.roll_no)).first()
    if taken:
        raise DuplicateUser("Roll number already exists (roll number is used as username)")
    if payload.aadhaar_id and db.query(User).filter(User.aadhaar_id == payload.aadhaar_id).first():
        raise DuplicateUser("Aadhaar ID already exists")
    if payload.phone:
        ensure_phone_available(db, payload.phone)


def create_student(db: Session, payload: StudentCreate) -> tuple[User, str]:
    """Create a student whose username is the roll number.

    Returns the new user and the generated plaintext password, which is not
    stored anywhere and must be handed to the student now.
    """

    password = generate_password()
    with transaction(db):
        _ensure_unique(db, payload)
        student = User(
            username=payload.roll_no,
            hashed_password=get_password_hash(password),
            role=RoleEnum.STUDENT,
            first_login=True,
            **payload.model_dump(),
        )
        db.add(student)
    logger.info("Created student account %s", student.username)
    return student, password


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not verify_password(current_password, user.hashed_password):
        raise ValidationFailed("Current password is incorrect")
    with transaction(db):
        user.hashed_password = get_password_hash(new_password)
        user.first_login = False
    logger.info("Password changed for %s", user.username)


def list_students(db: Session) -> list[dict[str, Any]]:
    students = db.query(User).filter(User.role == RoleEnum.STUDENT).order_by(User.username).all()
    beds = {bed.student_id: bed for bed in db.query(Bed).filter(Bed.student_id.isnot(None)).order_by(Bed.id.desc())}
    result = []
    for student in students:
        bed: Optional[Bed] = beds.get(student.id)
        row = {column.name: getattr(student, column.name) for column in User.__table__.columns}
        row.update(
            {
                "room_id": bed.room_id if bed else None,
                "room_number": bed.room.room_number if bed else None,
                "bed_number": bed.bed_number if bed else None,
            }
        )
        result.append(row)
    return result


def get_warden_contact(db: Session, settings: Settings) -> dict[str, Any]:
    warden = db.query(User).filter(User.role == RoleEnum.WARDEN).order_by(User.id).first()
    if warden is None:
        raise NotFound("Warden contact information not available")
    return {
        "name": warden.full_name,
        "email": warden.email,
        "phone": warden.phone,
        "office_hours": settings.warden_office_hours,
        "emergency_contact": settings.warden_emergency_contact,
    }
