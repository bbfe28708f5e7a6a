"""
数据模型模块
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.core.db import Base


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True, index=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    is_activated = Column(Boolean, default=False, nullable=False)
    activation_date = Column(DateTime, nullable=True)
    activated_by = Column(String(255), nullable=True)
    # 单一有效 QR 令牌，重新生成即覆盖
    qr_token = Column(String(128), unique=True, index=True, nullable=True)
    qr_token_expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    profile = relationship("Profile", back_populates="user", uselist=False)


class Profile(Base):
    __tablename__ = "profiles"
    id = Column(Integer, primary_key=True, index=True)
    # 一个用户最多一张名片，由唯一约束保证
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    display_name = Column(String(128), nullable=False)
    bio = Column(Text, nullable=True)
    phone = Column(String(32), nullable=True)
    slug = Column(String(128), unique=True, index=True, nullable=False)
    avatar_url = Column(String(512), nullable=True)
    theme_color = Column(String(16), default="#000000")
    background_color = Column(String(16), default="#ffffff")

    user = relationship("User", back_populates="profile")
    links = relationship("Link", back_populates="profile", cascade="all, delete-orphan")


class Link(Base):
    __tablename__ = "links"
    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("profiles.id"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    url = Column(String(2048), nullable=False)
    icon = Column(String(64), nullable=False)  # instagram / linkedin / globe ...
    order = Column("order", Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    profile = relationship("Profile", back_populates="links")


class NfcTag(Base):
    __tablename__ = "nfc_tags"
    id = Column(Integer, primary_key=True, index=True)
    tag_id = Column(String(128), unique=True, index=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    verified_by = Column(String(255), nullable=True)
    verified_at = Column(DateTime, nullable=True)
    claimed_by = Column(Integer, ForeignKey("users.id"), index=True, nullable=True)
    claimed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
