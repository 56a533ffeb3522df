"""Unit tests for schema validation."""
import pytest
from pydantic import ValidationError

from common.schemas import (
    AssignRoomRequest,
    PersonalDetailsRequestCreate,
    RoomChangeRequestCreate,
    RoomCreate,
    StudentCreate,
)


class TestStudentSchemas:
    def test_student_create_minimal(self):
        student = StudentCreate(roll_no="CS2024001", full_name="Asha Rao")

        assert student.phone is None
        assert student.email is None

    @pytest.mark.parametrize("phone", ["9876543210", "6000000000"])
    def test_student_phone_accepted(self, phone):
        assert StudentCreate(roll_no="R", full_name="N", phone=phone).phone == phone

    @pytest.mark.parametrize("phone", ["5876543210", "98765", "98765432101", "98765abcde"])
    def test_student_phone_rejected(self, phone):
        with pytest.raises(ValidationError):
            StudentCreate(roll_no="R", full_name="N", phone=phone)

    def test_student_requires_roll_no_and_name(self):
        with pytest.raises(ValidationError):
            StudentCreate(full_name="No Roll")
        with pytest.raises(ValidationError):
            StudentCreate(roll_no="", full_name="Empty Roll")

    def test_student_invalid_email(self):
        with pytest.raises(ValidationError):
            StudentCreate(roll_no="R", full_name="N", email="not-an-email")


class TestRoomSchemas:
    def test_room_create_defaults(self):
        room = RoomCreate(room_number="B201", floor=2, capacity=3)

        assert room.room_type == "standard"

    def test_room_capacity_bounds(self):
        with pytest.raises(ValidationError):
            RoomCreate(room_number="B202", floor=2, capacity=0)
        with pytest.raises(ValidationError):
            RoomCreate(room_number="B203", floor=2, capacity=21)

    def test_assignment_requires_all_fields(self):
        with pytest.raises(ValidationError):
            AssignRoomRequest(student_id=1, room_id=1)


class TestRequestSchemas:
    def test_room_change_requires_target(self):
        with pytest.raises(ValidationError):
            RoomChangeRequestCreate(reason="too noisy")

    def test_personal_details_tracks_supplied_fields(self):
        request = PersonalDetailsRequestCreate(phone="9123456789")

        assert request.model_dump(exclude_unset=True) == {"phone": "9123456789"}

    @pytest.mark.parametrize("field", ["phone", "guardian_phone"])
    def test_personal_details_phone_pattern(self, field):
        with pytest.raises(ValidationError):
            PersonalDetailsRequestCreate(**{field: "12345"})

        assert getattr(PersonalDetailsRequestCreate(**{field: "8123456789"}), field) == "8123456789"
