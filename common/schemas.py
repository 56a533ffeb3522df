"""Pydantic schemas shared across the services."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from .models import BedStatus, DayOfWeek, MealType, RequestStatus, RoleEnum

PHONE_PATTERN = r"^[6-9][0-9]{9}$"


class LoginRequest(BaseModel):
    username: str
    password: str


class UserRead(BaseModel):
    id: int
    username: str
    role: RoleEnum
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    aadhaar_id: Optional[str] = None
    roll_no: Optional[str] = None
    stream: Optional[str] = None
    branch: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    guardian_address: Optional[str] = None
    first_login: bool = True
    created_at: datetime

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class MessageResponse(BaseModel):
    message: str


class StudentCreate(BaseModel):
    roll_no: str = Field(..., min_length=1, max_length=50)
    full_name: str = Field(..., min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    aadhaar_id: Optional[str] = Field(None, max_length=20)
    stream: Optional[str] = None
    branch: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    guardian_address: Optional[str] = None


class Credentials(BaseModel):
    username: str
    password: str


class StudentCreated(BaseModel):
    message: str = "Student created successfully"
    credentials: Credentials
    student: UserRead


class StudentListItem(UserRead):
    room_id: Optional[int] = None
    room_number: Optional[str] = None
    bed_number: Optional[int] = None


class WardenContact(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    office_hours: str
    emergency_contact: str


class RoomCreate(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=20)
    floor: int = Field(..., ge=0)
    capacity: int = Field(..., ge=1, le=20)
    room_type: str = "standard"


class RoomRead(BaseModel):
    id: int
    room_number: str
    floor: int
    capacity: int
    room_type: str
    created_at: datetime

    model_config = {"from_attributes": True}


class RoomOccupancy(RoomRead):
    occupied_beds: int
    available_beds: int


class BedRead(BaseModel):
    id: int
    room_id: int
    bed_number: int
    status: BedStatus
    student_id: Optional[int] = None
    student_name: Optional[str] = None


class RoomDetail(RoomRead):
    beds: List[BedRead]


class AssignRoomRequest(BaseModel):
    student_id: int
    room_id: int
    bed_number: int


class Roommate(BaseModel):
    full_name: str


class MyRoom(RoomRead):
    bed_number: int
    roommates: List[Roommate]


class FoodMenuItemRead(BaseModel):
    id: int
    day_of_week: DayOfWeek
    meal_type: MealType
    items: str

    model_config = {"from_attributes": True}


class RoomChangeRequestCreate(BaseModel):
    requested_room_id: int
    requested_bed_number: int
    reason: Optional[str] = None


class RoomChangeRequestRead(BaseModel):
    id: int
    student_id: int
    student_name: str
    current_room_id: Optional[int] = None
    current_room: Optional[str] = None
    current_bed_number: Optional[int] = None
    requested_room_id: int
    requested_room: str
    requested_bed_number: int
    reason: Optional[str] = None
    status: RequestStatus
    requested_at: datetime
    processed_at: Optional[datetime] = None
    processed_by: Optional[int] = None
    comments: Optional[str] = None


class PersonalDetailsRequestCreate(BaseModel):
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    guardian_address: Optional[str] = None


class PersonalDetailsRequestRead(PersonalDetailsRequestCreate):
    id: int
    student_id: int
    student_name: str
    roll_no: Optional[str] = None
    status: RequestStatus
    requested_at: datetime
    processed_at: Optional[datetime] = None
    processed_by: Optional[int] = None
    comments: Optional[str] = None


class RequestSubmitted(BaseModel):
    message: str
    request_id: int
    status: RequestStatus


class ProcessRequest(BaseModel):
    comments: Optional[str] = None


class MyRequests(BaseModel):
    room_change_requests: List[RoomChangeRequestRead]
    personal_details_requests: List[PersonalDetailsRequestRead]
