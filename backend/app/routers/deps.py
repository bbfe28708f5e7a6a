from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.models import User
from app.services.user_service import get_user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    uid = request.session.get("uid")
    if not uid:
        raise UnauthorizedError()
    user = get_user(db, uid)
    if user is None:
        request.session.pop("uid", None)
        raise UnauthorizedError()
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user


def admin_identity(user: User) -> str:
    return user.email or user.username
