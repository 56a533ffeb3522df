"""Reusable FastAPI dependencies for auth and database access."""
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .auth import decode_token
from .database import get_db
from .errors import AuthRequired, Forbidden
from .models import RoleEnum, User

oauth_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)


def get_current_user(token: Optional[str] = Depends(oauth_scheme), db: Session = Depends(get_db)) -> User:
    if not token:
        raise AuthRequired()
    payload = decode_token(token)
    username: str | None = payload.get("sub")
    if username is None:
        raise AuthRequired("Missing subject in token")
    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise AuthRequired("User not found")
    return user


def allow_roles(*roles: RoleEnum) -> Callable[[User], User]:
    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise Forbidden()
        return current_user

    return dependency


require_warden = allow_roles(RoleEnum.WARDEN)
require_student = allow_roles(RoleEnum.STUDENT)
