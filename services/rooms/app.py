from contextlib import asynccontextmanager
from typing import List

from circuitbreaker import circuit
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.orm import Session

from common import assignment
from common.cache import SimpleTTLCache
from common.config import get_settings
from common.database import Base, engine, get_db
from common.dependencies import get_current_user, require_student, require_warden
from common.errors import install_error_handlers
from common.logging_middleware import add_audit_middleware
from common.models import DayOfWeek, FoodMenuItem, MealType, User
from common.rate_limit import apply_rate_limiter, limiter
from common.schemas import (
    AssignRoomRequest,
    FoodMenuItemRead,
    MessageResponse,
    MyRoom,
    RoomCreate,
    RoomDetail,
    RoomOccupancy,
    RoomRead,
)

settings = get_settings()
menu_cache: SimpleTTLCache[list[dict]] = SimpleTTLCache(ttl=settings.menu_cache_ttl)
MENU_CACHE_KEY = "food-menu"

_DAY_ORDER = {day: index for index, day in enumerate(DayOfWeek)}
_MEAL_ORDER = {meal: index for index, meal in enumerate(MealType)}


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Rooms Service", version="1.0.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    install_error_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "rooms")
    Instrumentator().instrument(fastapi_app).expose(fastapi_app)
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "rooms"}


@app.get("/api/rooms", response_model=List[RoomOccupancy])
@circuit(failure_threshold=5, recovery_timeout=60)
def list_rooms(_: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[dict]:
    return assignment.list_rooms_with_occupancy(db)


@app.get("/api/rooms/{room_id}", response_model=RoomDetail)
def get_room(room_id: int, _: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    return assignment.get_room_detail(db, room_id)


@app.post("/api/warden/rooms", response_model=RoomRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def create_room(
    request: Request,
    room_in: RoomCreate,
    _: User = Depends(require_warden),
    db: Session = Depends(get_db),
):
    return assignment.create_room(db, room_in.room_number, room_in.floor, room_in.capacity, room_in.room_type)


@app.post("/api/warden/assign-room", response_model=MessageResponse)
@limiter.limit("30/minute")
def assign_room(
    request: Request,
    payload: AssignRoomRequest,
    _: User = Depends(require_warden),
    db: Session = Depends(get_db),
) -> MessageResponse:
    assignment.assign_bed(db, payload.student_id, payload.room_id, payload.bed_number)
    return MessageResponse(message="Room assigned successfully")


@app.get("/api/student/my-room", response_model=MyRoom)
def my_room(current_user: User = Depends(require_student), db: Session = Depends(get_db)) -> dict:
    return assignment.get_student_room(db, current_user.id)


def _load_menu(db: Session) -> list[dict]:
    items = db.query(FoodMenuItem).all()
    items.sort(key=lambda item: (_DAY_ORDER[item.day_of_week], _MEAL_ORDER[item.meal_type]))
    return [FoodMenuItemRead.model_validate(item).model_dump() for item in items]


@app.get("/api/food-menu", response_model=List[FoodMenuItemRead])
def food_menu(_: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[dict]:
    return menu_cache.get_or_load(MENU_CACHE_KEY, lambda: _load_menu(db))
