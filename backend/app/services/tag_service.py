"""
NFC 标签服务
职责：管理员校验入库、用户认领、公开校验查询

状态：unverified -> verified -> claimed
- verify 为 upsert，重复校验不会清除已有认领
- claim 是存储层的条件更新（compare-and-swap），同一标签只会有一个认领者
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.models import NfcTag

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.utcnow()


def normalize_tag_id(tag_id: str) -> str:
    normalized = (tag_id or "").strip()
    if not normalized:
        raise ValidationError("tagId is required")
    return normalized


def serialize_tag(tag: NfcTag) -> Dict[str, Any]:
    return {
        "tag_id": tag.tag_id,
        "is_verified": bool(tag.is_verified),
        "verified_by": tag.verified_by,
        "verified_at": tag.verified_at,
        "claimed_by": tag.claimed_by,
        "claimed_at": tag.claimed_at,
    }


def get_tag_by_tag_id(db: Session, tag_id: str) -> Optional[NfcTag]:
    return db.query(NfcTag).filter(NfcTag.tag_id == tag_id).first()


def get_tag_by_user_id(db: Session, user_id: int) -> Optional[NfcTag]:
    """用户可能认领多个标签，返回最近认领的一个"""
    return (
        db.query(NfcTag)
        .filter(NfcTag.claimed_by == user_id)
        .order_by(NfcTag.claimed_at.desc(), NfcTag.id.desc())
        .first()
    )


def list_tags(db: Session) -> List[NfcTag]:
    return db.query(NfcTag).order_by(NfcTag.created_at.desc(), NfcTag.id.desc()).all()


def verify_tag(db: Session, tag_id: str, admin_identity: str) -> NfcTag:
    """校验标签：不存在则插入，存在则刷新校验信息"""
    tag_id = normalize_tag_id(tag_id)
    tag = get_tag_by_tag_id(db, tag_id)
    if tag is None:
        tag = NfcTag(tag_id=tag_id)
        db.add(tag)
        try:
            db.flush()
        except IntegrityError:
            # 并发校验：已被另一请求插入
            db.rollback()
            tag = get_tag_by_tag_id(db, tag_id)
            if tag is None:
                raise
    tag.is_verified = True
    tag.verified_by = admin_identity
    tag.verified_at = _now()
    db.add(tag)
    db.commit()
    db.refresh(tag)
    logger.info("Tag %s verified by %s", tag_id, admin_identity)
    return tag


def is_tag_verified(db: Session, tag_id: str) -> bool:
    tag_id = (tag_id or "").strip()
    if not tag_id:
        return False
    verified = db.query(NfcTag.is_verified).filter(NfcTag.tag_id == tag_id).scalar()
    return bool(verified)


def claim_tag(db: Session, tag_id: str, user_id: int) -> bool:
    """
    认领标签。仅当标签存在、已校验且未被他人认领时成功；失败时不修改任何数据。
    同一用户重复认领视为成功，保留首次认领时间。
    """
    tag_id = normalize_tag_id(tag_id)
    result = db.execute(
        update(NfcTag)
        .where(
            NfcTag.tag_id == tag_id,
            NfcTag.is_verified.is_(True),
            or_(NfcTag.claimed_by.is_(None), NfcTag.claimed_by == user_id),
        )
        .values(claimed_by=user_id, claimed_at=func.coalesce(NfcTag.claimed_at, _now()))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    claimed = result.rowcount == 1
    if claimed:
        logger.info("Tag %s claimed by user %s", tag_id, user_id)
    else:
        logger.warning("Claim of tag %s by user %s refused", tag_id, user_id)
    return claimed
