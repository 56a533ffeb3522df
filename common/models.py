"""SQLAlchemy models shared across all services."""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import Boolean, Date, DateTime, Enum as SqlEnum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class RoleEnum(str, Enum):
    STUDENT = "student"
    WARDEN = "warden"


class BedStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DayOfWeek(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    role: Mapped[RoleEnum] = mapped_column(SqlEnum(RoleEnum), default=RoleEnum.STUDENT, index=True)
    full_name: Mapped[str] = mapped_column(String(120))
    email: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    phone: Mapped[Optional[str]] = mapped_column(String(20), default=None)

    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, default=None)
    gender: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    aadhaar_id: Mapped[Optional[str]] = mapped_column(String(20), unique=True, default=None)
    roll_no: Mapped[Optional[str]] = mapped_column(String(50), unique=True, default=None)
    stream: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    branch: Mapped[Optional[str]] = mapped_column(String(100), default=None)

    address_line1: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    address_line2: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    city: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    state: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    guardian_name: Mapped[Optional[str]] = mapped_column(String(120), default=None)
    guardian_phone: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    guardian_address: Mapped[Optional[str]] = mapped_column(String(255), default=None)

    first_login: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    beds: Mapped[List["Bed"]] = relationship(back_populates="student")


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    room_number: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    floor: Mapped[int] = mapped_column(Integer)
    capacity: Mapped[int] = mapped_column(Integer)
    room_type: Mapped[str] = mapped_column(String(50), default="standard")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    beds: Mapped[List["Bed"]] = relationship(
        back_populates="room", order_by="Bed.bed_number", cascade="all, delete-orphan"
    )


class Bed(Base):
    __tablename__ = "beds"
    __table_args__ = (UniqueConstraint("room_id", "bed_number", name="uq_bed_room_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), index=True)
    bed_number: Mapped[int] = mapped_column(Integer)
    status: Mapped[BedStatus] = mapped_column(SqlEnum(BedStatus), default=BedStatus.AVAILABLE)
    student_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), default=None, index=True)

    room: Mapped[Room] = relationship(back_populates="beds")
    student: Mapped[Optional[User]] = relationship(back_populates="beds")


class FoodMenuItem(Base):
    __tablename__ = "food_menu"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    day_of_week: Mapped[DayOfWeek] = mapped_column(SqlEnum(DayOfWeek))
    meal_type: Mapped[MealType] = mapped_column(SqlEnum(MealType))
    items: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class RoomChangeRequest(Base):
    __tablename__ = "room_change_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    current_room_id: Mapped[Optional[int]] = mapped_column(ForeignKey("rooms.id"), default=None)
    current_bed_number: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    requested_room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id"))
    requested_bed_number: Mapped[int] = mapped_column(Integer)
    reason: Mapped[Optional[str]] = mapped_column(Text, default=None)
    status: Mapped[RequestStatus] = mapped_column(SqlEnum(RequestStatus), default=RequestStatus.PENDING, index=True)
    requested_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    processed_by: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), default=None)
    comments: Mapped[Optional[str]] = mapped_column(Text, default=None)

    student: Mapped[User] = relationship(foreign_keys=[student_id])
    current_room: Mapped[Optional[Room]] = relationship(foreign_keys=[current_room_id])
    requested_room: Mapped[Room] = relationship(foreign_keys=[requested_room_id])


class PersonalDetailsRequest(Base):
    __tablename__ = "personal_details_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    address_line1: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    address_line2: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    city: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    state: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    guardian_name: Mapped[Optional[str]] = mapped_column(String(120), default=None)
    guardian_phone: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    guardian_address: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    status: Mapped[RequestStatus] = mapped_column(SqlEnum(RequestStatus), default=RequestStatus.PENDING, index=True)
    requested_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    processed_by: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), default=None)
    comments: Mapped[Optional[str]] = mapped_column(Text, default=None)

    student: Mapped[User] = relationship(foreign_keys=[student_id])


PERSONAL_DETAIL_FIELDS = (
    "phone",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "postal_code",
    "guardian_name",
    "guardian_phone",
    "guardian_address",
)
