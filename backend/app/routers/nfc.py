from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.exceptions import NotFoundError, ValidationError
from app.models import User
from app.models.schemas import ClaimOut, TagBody, TagCheckOut, TagOut
from app.routers.deps import get_current_user
from app.services import tag_service

router = APIRouter(prefix="/nfc", tags=["nfc"])


@router.get("/check/{tag_id}", response_model=TagCheckOut, summary="写入前校验标签")
async def check_tag(tag_id: str, db: Session = Depends(get_db)):
    return {"is_verified": tag_service.is_tag_verified(db, tag_id)}


@router.post("/claim", response_model=ClaimOut, summary="认领标签")
async def claim_tag(body: TagBody, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not tag_service.claim_tag(db, body.tag_id, user.id):
        raise ValidationError("Tag is not verified or already claimed")
    tag = tag_service.get_tag_by_tag_id(db, tag_service.normalize_tag_id(body.tag_id))
    return {"success": True, "tag": tag_service.serialize_tag(tag)}


@router.get("/me", response_model=TagOut, summary="当前用户绑定的标签")
async def get_my_tag(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    tag = tag_service.get_tag_by_user_id(db, user.id)
    if tag is None:
        raise NotFoundError("Tag not found")
    return tag_service.serialize_tag(tag)
