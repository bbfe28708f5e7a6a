from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.exceptions import NotFoundError
from app.models import User
from app.models.schemas import TagBody, TagOut, UserOut
from app.routers.deps import admin_identity, require_admin
from app.services import tag_service, user_service

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/tags", response_model=List[TagOut], summary="管理员-标签库存")
async def admin_list_tags(_: User = Depends(require_admin), db: Session = Depends(get_db)):
    return [tag_service.serialize_tag(t) for t in tag_service.list_tags(db)]


@router.get("/tags/{tag_id}", response_model=TagOut, summary="管理员-查询标签")
async def admin_get_tag(tag_id: str, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    tag = tag_service.get_tag_by_tag_id(db, tag_id.strip())
    if tag is None:
        raise NotFoundError("Tag not found")
    return tag_service.serialize_tag(tag)


@router.post("/verify-tag", response_model=TagOut, summary="管理员-校验标签")
async def admin_verify_tag(body: TagBody, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    tag = tag_service.verify_tag(db, body.tag_id, admin_identity(admin))
    return tag_service.serialize_tag(tag)


@router.get("/users", response_model=List[UserOut], summary="管理员-用户列表")
async def admin_list_users(_: User = Depends(require_admin), db: Session = Depends(get_db)):
    return [user_service.serialize_user(u) for u in user_service.list_users(db)]


@router.post("/activate/{user_id}", response_model=UserOut, summary="管理员-激活用户")
async def admin_activate_user(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    user = user_service.activate_user(db, user_id, admin_identity(admin))
    return user_service.serialize_user(user)
