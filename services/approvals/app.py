from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Body, Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.orm import Session

from common import workflow
from common.config import get_settings
from common.database import Base, engine, get_db
from common.dependencies import require_student, require_warden
from common.errors import install_error_handlers
from common.logging_middleware import add_audit_middleware
from common.models import User
from common.rate_limit import apply_rate_limiter, limiter
from common.schemas import (
    MessageResponse,
    MyRequests,
    PersonalDetailsRequestCreate,
    PersonalDetailsRequestRead,
    ProcessRequest,
    RequestSubmitted,
    RoomChangeRequestCreate,
    RoomChangeRequestRead,
)

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Approvals Service", version="1.0.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    install_error_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "approvals")
    Instrumentator().instrument(fastapi_app).expose(fastapi_app)
    return fastapi_app


app = create_app()


def _past_tense(action: str) -> str:
    return "approved" if action == workflow.APPROVE else "rejected"


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "approvals"}


@app.post("/api/student/room-change-request", response_model=RequestSubmitted, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def submit_room_change_request(
    request: Request,
    payload: RoomChangeRequestCreate,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
) -> RequestSubmitted:
    created = workflow.submit_room_change_request(
        db, current_user, payload.requested_room_id, payload.requested_bed_number, payload.reason
    )
    return RequestSubmitted(
        message="Room change request submitted successfully", request_id=created.id, status=created.status
    )


@app.get("/api/warden/room-change-requests", response_model=List[RoomChangeRequestRead])
def list_room_change_requests(_: User = Depends(require_warden), db: Session = Depends(get_db)) -> list[dict]:
    return workflow.list_room_change_requests(db)


@app.put("/api/warden/room-change-requests/{request_id}/{action}", response_model=MessageResponse)
@limiter.limit("30/minute")
def process_room_change_request(
    request: Request,
    request_id: int,
    action: str,
    payload: Optional[ProcessRequest] = Body(default=None),
    warden: User = Depends(require_warden),
    db: Session = Depends(get_db),
) -> MessageResponse:
    comments = payload.comments if payload else None
    workflow.process_request(db, "room_change", request_id, action, warden, comments)
    return MessageResponse(message=f"Room change request {_past_tense(action)} successfully")


@app.post(
    "/api/student/personal-details-update-request",
    response_model=RequestSubmitted,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
def submit_personal_details_request(
    request: Request,
    payload: PersonalDetailsRequestCreate,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
) -> RequestSubmitted:
    created = workflow.submit_personal_details_request(db, current_user, payload.model_dump(exclude_unset=True))
    return RequestSubmitted(
        message="Personal details update request submitted successfully",
        request_id=created.id,
        status=created.status,
    )


@app.get("/api/warden/personal-details-update-requests", response_model=List[PersonalDetailsRequestRead])
def list_personal_details_requests(_: User = Depends(require_warden), db: Session = Depends(get_db)) -> list[dict]:
    return workflow.list_personal_details_requests(db)


@app.put("/api/warden/personal-details-update-requests/{request_id}/{action}", response_model=MessageResponse)
@limiter.limit("30/minute")
def process_personal_details_request(
    request: Request,
    request_id: int,
    action: str,
    payload: Optional[ProcessRequest] = Body(default=None),
    warden: User = Depends(require_warden),
    db: Session = Depends(get_db),
) -> MessageResponse:
    comments = payload.comments if payload else None
    workflow.process_request(db, "personal_details", request_id, action, warden, comments)
    return MessageResponse(message=f"Personal details update request {_past_tense(action)} successfully")


@app.get("/api/student/my-requests", response_model=MyRequests)
def my_requests(current_user: User = Depends(require_student), db: Session = Depends(get_db)) -> dict:
    return workflow.list_my_requests(db, current_user)
