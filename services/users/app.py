from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.orm import Session

from common import accounts, auth
from common.config import get_settings
from common.database import Base, SessionLocal, engine, get_db
from common.dependencies import get_current_user, require_student, require_warden
from common.errors import AuthRequired, install_error_handlers
from common.logging_middleware import add_audit_middleware
from common.models import User
from common.rate_limit import apply_rate_limiter, limiter, login_limit
from common.schemas import (
    ChangePasswordRequest,
    Credentials,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    StudentCreate,
    StudentCreated,
    StudentListItem,
    UserRead,
    WardenContact,
)
from common.seed import initialize_data

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    if settings.seed_initial_data:
        with SessionLocal() as db:
            initialize_data(db)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Users Service", version="1.0.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    install_error_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "users")
    Instrumentator().instrument(fastapi_app).expose(fastapi_app)
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "users"}


@app.post("/api/login", response_model=LoginResponse)
@limiter.limit(login_limit)
def login(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    user = auth.authenticate_user(db, credentials.username, credentials.password)
    if not user:
        raise AuthRequired("Invalid credentials")
    return LoginResponse(token=auth.create_user_token(user), user=UserRead.model_validate(user))


@app.get("/api/profile", response_model=UserRead)
def profile(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@app.post("/api/change-password", response_model=MessageResponse)
@limiter.limit("5/minute")
def change_password(
    request: Request,
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    accounts.change_password(db, current_user, payload.current_password, payload.new_password)
    return MessageResponse(message="Password changed successfully")


@app.post("/api/warden/create-student", response_model=StudentCreated, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def create_student(
    request: Request,
    payload: StudentCreate,
    _: User = Depends(require_warden),
    db: Session = Depends(get_db),
) -> StudentCreated:
    student, password = accounts.create_student(db, payload)
    return StudentCreated(
        credentials=Credentials(username=student.username, password=password),
        student=UserRead.model_validate(student),
    )


@app.get("/api/warden/students", response_model=list[StudentListItem])
def list_students(_: User = Depends(require_warden), db: Session = Depends(get_db)) -> list[dict]:
    return accounts.list_students(db)


@app.get("/api/student/warden-contact", response_model=WardenContact)
def warden_contact(_: User = Depends(require_student), db: Session = Depends(get_db)) -> dict:
    return accounts.get_warden_contact(db, settings)
