"""
用户服务
职责：身份声明落库（upsert）、管理员激活
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models import User

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.utcnow()


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "is_admin": bool(user.is_admin),
        "is_activated": bool(user.is_activated),
        "activation_date": user.activation_date,
        "activated_by": user.activated_by,
        "created_at": user.created_at,
    }


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def _is_admin_email(email: Optional[str]) -> bool:
    return bool(email) and email.strip().lower() in settings.admin_emails


def upsert_user(db: Session, username: str, email: Optional[str] = None) -> User:
    """
    首次认证登录时创建用户，之后按用户名更新邮箱。
    管理员标记只会被授予，不会因登录被撤销。
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("username is required")

    user = db.query(User).filter(User.username == username).first()
    if user is None:
        user = User(username=username, email=email, is_admin=_is_admin_email(email))
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # 并发登录：另一请求已插入同名用户
            db.rollback()
            user = db.query(User).filter(User.username == username).first()
            if user is None:
                raise
        else:
            db.refresh(user)
            logger.info("Created user %s (id=%s, admin=%s)", user.username, user.id, user.is_admin)
            return user

    changed = False
    if email is not None and email != user.email:
        user.email = email
        changed = True
    if not user.is_admin and _is_admin_email(user.email):
        user.is_admin = True
        changed = True
    if changed:
        db.add(user)
        db.commit()
        db.refresh(user)
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at.asc(), User.id.asc()).all()


def activate_user(db: Session, user_id: int, admin_identity: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    user.is_activated = True
    user.activation_date = _now()
    user.activated_by = admin_identity
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s activated by %s", user.id, admin_identity)
    return user
