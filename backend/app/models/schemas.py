"""
请求/响应数据模型
对外字段统一使用 camelCase（如 displayName、linkIds），内部使用 snake_case。
"""

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime, timezone


HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"
SLUG = r"^[a-z0-9][a-z0-9_-]*$"


class CamelModel(BaseModel):
    """camelCase 别名的基础模型"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ============ 用户 ============

class LoginBody(CamelModel):
    username: str = Field(min_length=1, max_length=64)
    email: Optional[str] = Field(default=None, max_length=255)


class UserOut(CamelModel):
    id: int
    username: str
    email: Optional[str] = None
    is_admin: bool = False
    is_activated: bool = False
    activation_date: Optional[datetime] = None
    activated_by: Optional[str] = None
    created_at: Optional[datetime] = None


# ============ 链接 ============

class LinkOut(CamelModel):
    id: int
    profile_id: int
    title: str
    url: str
    icon: str
    order: int


class LinkCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    url: str = Field(min_length=1, max_length=2048)
    icon: str = Field(min_length=1, max_length=64)
    order: Optional[int] = Field(default=None, ge=0)


class LinkUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    url: Optional[str] = Field(default=None, min_length=1, max_length=2048)
    icon: Optional[str] = Field(default=None, min_length=1, max_length=64)
    order: Optional[int] = Field(default=None, ge=0)


class ReorderBody(CamelModel):
    link_ids: List[int]


# ============ 名片 ============

class ProfileOut(CamelModel):
    id: int
    user_id: int
    display_name: str
    bio: Optional[str] = None
    phone: Optional[str] = None
    slug: str
    avatar_url: Optional[str] = None
    theme_color: Optional[str] = None
    background_color: Optional[str] = None


class ProfileWithLinks(ProfileOut):
    links: List[LinkOut] = Field(default_factory=list)


class PublicProfile(ProfileWithLinks):
    is_activated: bool = False


class ProfileUpdate(CamelModel):
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    bio: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=32)
    slug: Optional[str] = Field(default=None, min_length=1, max_length=128, pattern=SLUG)
    avatar_url: Optional[str] = Field(default=None, max_length=512)
    theme_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    background_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)


# ============ NFC 标签 ============

class TagBody(CamelModel):
    tag_id: str = Field(min_length=1, max_length=128)


class TagOut(CamelModel):
    tag_id: str
    is_verified: bool
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    claimed_by: Optional[int] = None
    claimed_at: Optional[datetime] = None


class TagCheckOut(CamelModel):
    is_verified: bool


class ClaimOut(CamelModel):
    success: bool
    tag: TagOut


# ============ QR 令牌 ============

class QrTokenOut(CamelModel):
    token: str
    expires_at: datetime

    @field_serializer("expires_at")
    def _as_utc(self, value: datetime) -> str:
        # 库内存的是 naive UTC，输出时带上时区
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat().replace("+00:00", "Z")


# ============ 通用 ============

class OkOut(CamelModel):
    ok: bool = True
