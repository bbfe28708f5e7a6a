from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.exceptions import NotFoundError
from app.models import User
from app.models.schemas import ProfileOut, ProfileUpdate, ProfileWithLinks, PublicProfile, QrTokenOut
from app.routers.deps import get_current_user
from app.services import profile_service, qr_service

router = APIRouter(tags=["profiles"])


@router.get("/profiles/me", response_model=ProfileWithLinks, summary="获取（必要时创建）当前用户名片")
async def get_my_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.get_or_create_profile(db, user)


@router.patch("/profiles/me", response_model=ProfileOut, summary="部分更新当前用户名片")
async def update_my_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = profile_service.require_profile_for_user(db, user.id)
    updated = profile_service.update_profile(db, profile.id, body.model_dump(exclude_unset=True))
    return profile_service.serialize_profile(updated)


@router.post("/profiles/qr/generate", response_model=QrTokenOut, summary="生成 QR 访问令牌")
async def generate_qr_token(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    token, expires_at = qr_service.generate_token(db, user.id)
    return {"token": token, "expires_at": expires_at}


@router.get("/public/profiles/{slug}", response_model=PublicProfile, summary="公开名片")
async def get_public_profile(slug: str, db: Session = Depends(get_db)):
    data = profile_service.get_profile_by_slug(db, slug)
    if data is None:
        raise NotFoundError("Profile not found")
    return data


@router.get("/public/qr/{token}", response_model=PublicProfile, summary="通过 QR 令牌访问名片")
async def get_profile_by_qr_token(token: str, db: Session = Depends(get_db)):
    user = qr_service.get_active_token_user(db, token)
    profile = profile_service.get_profile_by_user_id(db, user.id) if user else None
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile_service.get_profile_by_slug(db, profile.slug)
