from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
import logging

from app.core.config import settings
from app.core.db import get_db
from app.core.exceptions import ForbiddenError
from app.models import User
from app.models.schemas import LoginBody, OkOut, UserOut
from app.routers.deps import get_current_user
from app.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=UserOut)
async def login(body: LoginBody, request: Request, db: Session = Depends(get_db)):
    """
    身份声明登录：外部认证服务回调前的开发入口。
    按用户名 upsert 用户，并把 uid 写入会话。
    """
    if not settings.dev_login_enabled:
        raise ForbiddenError("Login is handled by the identity provider")
    user = user_service.upsert_user(db, body.username, body.email)
    request.session["uid"] = user.id
    logger.info("User %s logged in", user.id)
    return user_service.serialize_user(user)


@router.post("/logout", response_model=OkOut)
async def logout(request: Request):
    request.session.clear()
    return {"ok": True}


@router.get("/me", response_model=UserOut)
async def get_me(user: User = Depends(get_current_user)):
    return user_service.serialize_user(user)
