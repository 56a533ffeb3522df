"""Initial data: the default warden, the room/bed layout and the weekly menu."""
from __future__ import annotations

import logging
import math

from sqlalchemy.orm import Session

from .assignment import create_room
from .auth import get_password_hash
from .config import get_settings
from .database import transaction
from .models import DayOfWeek, FoodMenuItem, MealType, RoleEnum, Room, User

logger = logging.getLogger(__name__)

ROOM_COUNT = 10
BEDS_PER_ROOM = 3
ROOMS_PER_FLOOR = 4

WEEKLY_MENU: dict[DayOfWeek, dict[MealType, str]] = {
    DayOfWeek.MONDAY: {
        MealType.BREAKFAST: "Bread, Butter, Jam, Tea/Coffee, Boiled Eggs",
        MealType.LUNCH: "Rice, Dal, Vegetable Curry, Chapati, Pickle",
        MealType.DINNER: "Rice, Sambar, Dry Vegetable, Chapati, Curd",
    },
    DayOfWeek.TUESDAY: {
        MealType.BREAKFAST: "Poha, Tea/Coffee, Banana",
        MealType.LUNCH: "Rice, Rasam, Vegetable Curry, Chapati, Papad",
        MealType.DINNER: "Rice, Dal, Mixed Vegetable, Chapati, Pickle",
    },
    DayOfWeek.WEDNESDAY: {
        MealType.BREAKFAST: "Idli, Sambar, Chutney, Tea/Coffee",
        MealType.LUNCH: "Rice, Curd, Vegetable, Chapati, Pickle",
        MealType.DINNER: "Rice, Dal, Fry, Chapati, Salad",
    },
    DayOfWeek.THURSDAY: {
        MealType.BREAKFAST: "Upma, Chutney, Tea/Coffee",
        MealType.LUNCH: "Rice, Dal Tadka, Aloo Gobi, Chapati, Salad",
        MealType.DINNER: "Jeera Rice, Rajma, Chapati, Curd",
    },
    DayOfWeek.FRIDAY: {
        MealType.BREAKFAST: "Dosa, Sambar, Chutney, Tea/Coffee",
        MealType.LUNCH: "Rice, Sambar, Cabbage Poriyal, Chapati, Papad",
        MealType.DINNER: "Vegetable Pulao, Raita, Chapati, Dal",
    },
    DayOfWeek.SATURDAY: {
        MealType.BREAKFAST: "Aloo Paratha, Curd, Tea/Coffee",
        MealType.LUNCH: "Rice, Chole, Bhature, Salad",
        MealType.DINNER: "Rice, Dal, Paneer Curry, Chapati",
    },
    DayOfWeek.SUNDAY: {
        MealType.BREAKFAST: "Puri, Aloo Sabzi, Tea/Coffee",
        MealType.LUNCH: "Vegetable Biryani, Raita, Salan, Sweet",
        MealType.DINNER: "Rice, Dal, Mixed Vegetable, Chapati, Curd",
    },
}


def ensure_warden(db: Session) -> User:
    warden = db.query(User).filter(User.username == "warden").first()
    if warden is not None:
        return warden
    with transaction(db):
        warden = User(
            username="warden",
            hashed_password=get_password_hash(get_settings().default_warden_password),
            role=RoleEnum.WARDEN,
            full_name="Hostel Warden",
            email="warden@hostel.edu",
            phone="9876543210",
            first_login=False,
        )
        db.add(warden)
    logger.info("Default warden account created")
    return warden


def ensure_rooms(db: Session) -> None:
    if db.query(Room).first() is not None:
        return
    for index in range(1, ROOM_COUNT + 1):
        create_room(
            db,
            room_number=f"R{index:03d}",
            floor=math.ceil(index / ROOMS_PER_FLOOR),
            capacity=BEDS_PER_ROOM,
        )


def ensure_food_menu(db: Session) -> None:
    if db.query(FoodMenuItem).first() is not None:
        return
    with transaction(db):
        for day, meals in WEEKLY_MENU.items():
            for meal_type, items in meals.items():
                db.add(FoodMenuItem(day_of_week=day, meal_type=meal_type, items=items))
    logger.info("Food menu seeded")


def initialize_data(db: Session) -> None:
    """Create whatever part of the initial data is missing."""

    ensure_warden(db)
    ensure_rooms(db)
    ensure_food_menu(db)
