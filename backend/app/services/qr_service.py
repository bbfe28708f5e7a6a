"""
QR 访问令牌服务

每个用户同一时间只有一个令牌，重新生成即覆盖旧令牌。
resolve_token 只做精确匹配，不过滤过期；过期判断由 is_token_active 在服务端完成。
"""
from datetime import datetime, timedelta
from typing import Optional, Tuple
import logging
import secrets

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models import User

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.utcnow()


def generate_token(db: Session, user_id: int) -> Tuple[str, datetime]:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    token = secrets.token_urlsafe(32)
    expires_at = _now() + timedelta(seconds=settings.qr_token_ttl_seconds)
    user.qr_token = token
    user.qr_token_expires_at = expires_at
    db.add(user)
    db.commit()
    logger.info("Issued QR token for user %s, expires at %s", user_id, expires_at.isoformat())
    return token, expires_at


def resolve_token(db: Session, token: str) -> Optional[int]:
    if not token:
        return None
    return db.query(User.id).filter(User.qr_token == token).scalar()


def is_token_active(user: User, now: Optional[datetime] = None) -> bool:
    if not user.qr_token or user.qr_token_expires_at is None:
        return False
    return (now or _now()) < user.qr_token_expires_at


def get_active_token_user(db: Session, token: str, now: Optional[datetime] = None) -> Optional[User]:
    """解析令牌并校验有效期，过期视为不存在"""
    user_id = resolve_token(db, token)
    if user_id is None:
        return None
    user = db.get(User, user_id)
    if user is None or not is_token_active(user, now):
        return None
    return user
