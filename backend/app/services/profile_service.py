"""
名片服务
职责：名片的懒创建、查询（含链接）与部分更新
"""
from typing import Any, Dict, Optional
import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models import Profile, User
from app.services.link_service import get_links, serialize_link

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = (
    "display_name",
    "bio",
    "phone",
    "slug",
    "avatar_url",
    "theme_color",
    "background_color",
)
_NOT_NULL_FIELDS = ("display_name", "slug")
_MAX_CREATE_ATTEMPTS = 3


def serialize_profile(profile: Profile) -> Dict[str, Any]:
    return {
        "id": profile.id,
        "user_id": profile.user_id,
        "display_name": profile.display_name,
        "bio": profile.bio,
        "phone": profile.phone,
        "slug": profile.slug,
        "avatar_url": profile.avatar_url,
        "theme_color": profile.theme_color,
        "background_color": profile.background_color,
    }


def profile_with_links(db: Session, profile: Profile) -> Dict[str, Any]:
    data = serialize_profile(profile)
    data["links"] = [serialize_link(link) for link in get_links(db, profile.id)]
    return data


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9_-]+", "-", (value or "").strip().lower()).strip("-_")
    return slug


def _available_slug(db: Session, base: str) -> str:
    candidate = base
    suffix = 2
    while db.query(Profile.id).filter(Profile.slug == candidate).first() is not None:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def get_profile_by_user_id(db: Session, user_id: int) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.user_id == user_id).first()


def require_profile_for_user(db: Session, user_id: int) -> Profile:
    profile = get_profile_by_user_id(db, user_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


def get_profile_by_slug(db: Session, slug: str) -> Optional[Dict[str, Any]]:
    """公开查询：名片 + 按 order 排序的链接 + 所有者激活状态"""
    profile = db.query(Profile).filter(Profile.slug == slug).first()
    if profile is None:
        return None
    data = profile_with_links(db, profile)
    data["is_activated"] = bool(profile.user and profile.user.is_activated)
    return data


def get_or_create_profile(db: Session, user: User) -> Dict[str, Any]:
    """
    获取当前用户的名片，不存在则按身份信息生成默认名片。

    profiles.user_id 上有唯一约束；并发首访时落败的一方回滚后读取胜者的行。
    """
    profile = get_profile_by_user_id(db, user.id)
    attempts = 0
    while profile is None:
        attempts += 1
        base = slugify(user.username) or f"user-{user.id}"
        profile = Profile(
            user_id=user.id,
            display_name=user.username,
            slug=_available_slug(db, base),
            bio=settings.default_bio,
            theme_color=settings.default_theme_color,
            background_color=settings.default_background_color,
        )
        db.add(profile)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            profile = get_profile_by_user_id(db, user.id)
            if profile is None and attempts >= _MAX_CREATE_ATTEMPTS:
                raise
            continue
        db.refresh(profile)
        logger.info("Created default profile %s (slug=%s) for user %s", profile.id, profile.slug, user.id)
    return profile_with_links(db, profile)


def update_profile(db: Session, profile_id: int, updates: Dict[str, Any]) -> Profile:
    """部分更新：只修改传入的字段"""
    profile = db.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    changes = {k: v for k, v in updates.items() if k in _UPDATABLE_FIELDS}
    for key in _NOT_NULL_FIELDS:
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be null")
    for key, value in changes.items():
        setattr(profile, key, value)
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Slug is already taken")
    db.refresh(profile)
    return profile
