"""
链接服务
职责：名片链接的增删改与排序

排序约定：
- 新建链接未指定 order 时追加到末尾（max(order) + 1）
- 删除链接不会重排其余链接
- reorder 在单个事务内完成，结果始终为 0..N-1 的连续序列
"""
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.models import Link

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("title", "url", "icon", "order")


def serialize_link(link: Link) -> Dict[str, Any]:
    return {
        "id": link.id,
        "profile_id": link.profile_id,
        "title": link.title,
        "url": link.url,
        "icon": link.icon,
        "order": link.order,
    }


def get_links(db: Session, profile_id: int) -> List[Link]:
    """按 order 升序返回名片的全部链接（order 相同按 id）"""
    return (
        db.query(Link)
        .filter(Link.profile_id == profile_id)
        .order_by(Link.order.asc(), Link.id.asc())
        .all()
    )


def get_owned_link(db: Session, profile_id: int, link_id: int) -> Link:
    """取出属于该名片的链接；不存在或属于他人一律视为 404"""
    link = db.query(Link).filter(Link.id == link_id, Link.profile_id == profile_id).first()
    if link is None:
        raise NotFoundError("Link not found")
    return link


def _next_order(db: Session, profile_id: int) -> int:
    current = db.query(func.max(Link.order)).filter(Link.profile_id == profile_id).scalar()
    return 0 if current is None else current + 1


def create_link(
    db: Session,
    profile_id: int,
    title: str,
    url: str,
    icon: str,
    order: Optional[int] = None,
) -> Link:
    if order is None:
        order = _next_order(db, profile_id)
    link = Link(profile_id=profile_id, title=title, url=url, icon=icon, order=order)
    db.add(link)
    db.commit()
    db.refresh(link)
    logger.info("Created link %s on profile %s at order %s", link.id, profile_id, order)
    return link


def update_link(db: Session, profile_id: int, link_id: int, updates: Dict[str, Any]) -> Link:
    """部分更新：只修改传入的字段"""
    link = get_owned_link(db, profile_id, link_id)
    changes = {k: v for k, v in updates.items() if k in _UPDATABLE_FIELDS}
    for key, value in changes.items():
        if value is None:
            raise ValidationError(f"{key} cannot be null")
    for key, value in changes.items():
        setattr(link, key, value)
    db.add(link)
    db.commit()
    db.refresh(link)
    return link


def delete_link(db: Session, profile_id: int, link_id: int) -> None:
    link = get_owned_link(db, profile_id, link_id)
    db.delete(link)
    db.commit()
    logger.info("Deleted link %s from profile %s", link_id, profile_id)


def reorder_links(db: Session, profile_id: int, link_ids: List[int]) -> List[Link]:
    """
    按给定顺序重排链接。

    列出的链接依次获得 0..k-1，未列出的链接保持原有相对顺序，接在 k..N-1。
    任何不属于该名片的 id 都会使整个操作失败，不写入任何行。
    """
    if len(set(link_ids)) != len(link_ids):
        raise ValidationError("linkIds must not contain duplicates")

    current = get_links(db, profile_id)
    by_id = {link.id: link for link in current}
    foreign = [link_id for link_id in link_ids if link_id not in by_id]
    if foreign:
        logger.warning("Reorder on profile %s rejected, foreign link ids: %s", profile_id, foreign)
        raise NotFoundError("Link not found")

    listed = set(link_ids)
    ordered = [by_id[link_id] for link_id in link_ids] + [link for link in current if link.id not in listed]
    try:
        for index, link in enumerate(ordered):
            link.order = index
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_links(db, profile_id)
