from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.models import User
from app.models.schemas import LinkCreate, LinkOut, LinkUpdate, ReorderBody
from app.routers.deps import get_current_user
from app.services import link_service, profile_service

router = APIRouter(prefix="/links", tags=["links"])


# 所有链接操作都从当前用户反查名片，不接受客户端传入的 profileId
@router.get("", response_model=List[LinkOut])
async def list_links(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = profile_service.require_profile_for_user(db, user.id)
    return [link_service.serialize_link(link) for link in link_service.get_links(db, profile.id)]


@router.post("", response_model=LinkOut, status_code=status.HTTP_201_CREATED)
async def create_link(body: LinkCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = profile_service.require_profile_for_user(db, user.id)
    link = link_service.create_link(db, profile.id, body.title, body.url, body.icon, body.order)
    return link_service.serialize_link(link)


@router.post("/reorder", response_model=List[LinkOut])
async def reorder_links(body: ReorderBody, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = profile_service.require_profile_for_user(db, user.id)
    links = link_service.reorder_links(db, profile.id, body.link_ids)
    return [link_service.serialize_link(link) for link in links]


@router.patch("/{link_id}", response_model=LinkOut)
async def update_link(
    link_id: int,
    body: LinkUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = profile_service.require_profile_for_user(db, user.id)
    link = link_service.update_link(db, profile.id, link_id, body.model_dump(exclude_unset=True))
    return link_service.serialize_link(link)


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(link_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = profile_service.require_profile_for_user(db, user.id)
    link_service.delete_link(db, profile.id, link_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
