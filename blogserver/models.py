"""Relational tables of the blog."""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import CHAR, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from blogserver.apptypes import Category, Register, RoleID, Storage

DEFAULT_SIGNATURE = "签名是空白的，这位用户似乎比较低调。"


class _IntEnumType(TypeDecorator):
    """Stores an ``IntEnum`` member as its integer value."""

    impl = Integer
    cache_ok = True

    def __init__(self, enum_class):
        super().__init__()
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        return None if value is None else int(value)

    def process_result_value(self, value, dialect):
        return None if value is None else self.enum_class(value)


class Base(DeclarativeBase):
    """Declarative base of all tables."""


class _Model:
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, index=True, nullable=True)


class Image(_Model, Base):
    """Uploaded image."""

    __tablename__ = "images"

    name: Mapped[str] = mapped_column(Text, default="")
    url: Mapped[str] = mapped_column(String(255), unique=True)
    category: Mapped[Category] = mapped_column(_IntEnumType(Category), default=Category.NULL)
    storage: Mapped[Storage] = mapped_column(_IntEnumType(Storage), default=Storage.LOCAL)


class User(_Model, Base):
    """Registered user."""

    __tablename__ = "users"

    uuid: Mapped[str] = mapped_column(CHAR(36), unique=True, default=lambda: str(uuid.uuid4()))
    username: Mapped[str] = mapped_column(Text, default="")
    password: Mapped[str] = mapped_column(Text, default="")
    email: Mapped[str] = mapped_column(Text, default="")
    openid: Mapped[str] = mapped_column(Text, default="")
    avatar: Mapped[str] = mapped_column(String(255), default="")
    address: Mapped[str] = mapped_column(Text, default="")
    signature: Mapped[str] = mapped_column(String(255), default=DEFAULT_SIGNATURE)
    role_id: Mapped[RoleID] = mapped_column(_IntEnumType(RoleID), default=RoleID.GUEST)
    register: Mapped[Register] = mapped_column(_IntEnumType(Register), default=Register.EMAIL)
    freeze: Mapped[bool] = mapped_column(Boolean, default=False)


class Advertisement(_Model, Base):
    """Advertisement shown on the site."""

    __tablename__ = "advertisements"

    ad_image: Mapped[Optional[str]] = mapped_column(String(255), ForeignKey("images.url"))
    link: Mapped[str] = mapped_column(Text, default="")
    title: Mapped[str] = mapped_column(Text, default="")
    content: Mapped[str] = mapped_column(Text, default="")

    image: Mapped[Optional[Image]] = relationship(foreign_keys=[ad_image])


class ArticleCategory(Base):
    """Article category with its article count."""

    __tablename__ = "article_categories"

    category: Mapped[str] = mapped_column(String(191), primary_key=True)
    number: Mapped[int] = mapped_column(Integer, default=0)


class ArticleLike(_Model, Base):
    """An article collected by a user."""

    __tablename__ = "article_likes"

    article_id: Mapped[str] = mapped_column(Text, default="")
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"))

    user: Mapped[Optional[User]] = relationship(foreign_keys=[user_id])


class ArticleTag(Base):
    """Article tag with its article count."""

    __tablename__ = "article_tags"

    tag: Mapped[str] = mapped_column(String(191), primary_key=True)
    number: Mapped[int] = mapped_column(Integer, default=0)


class Comment(_Model, Base):
    """Comment on an article, possibly replying to another comment."""

    __tablename__ = "comments"

    article_id: Mapped[str] = mapped_column(Text, default="")
    p_id: Mapped[Optional[int]] = mapped_column(ForeignKey("comments.id"), nullable=True)
    user_uuid: Mapped[Optional[str]] = mapped_column(CHAR(36), ForeignKey("users.uuid"))
    content: Mapped[str] = mapped_column(Text, default="")

    p_comment: Mapped[Optional["Comment"]] = relationship(
        back_populates="children", remote_side="Comment.id"
    )
    children: Mapped[List["Comment"]] = relationship(back_populates="p_comment")
    user: Mapped[Optional[User]] = relationship(foreign_keys=[user_uuid])


class Feedback(_Model, Base):
    """Feedback left by a user, with the reply."""

    __tablename__ = "feedbacks"

    user_uuid: Mapped[Optional[str]] = mapped_column(CHAR(36), ForeignKey("users.uuid"))
    content: Mapped[str] = mapped_column(Text, default="")
    reply: Mapped[str] = mapped_column(Text, default="")

    user: Mapped[Optional[User]] = relationship(foreign_keys=[user_uuid])


class FooterLink(Base):
    """Link shown in the page footer."""

    __tablename__ = "footer_links"

    title: Mapped[str] = mapped_column(String(191), primary_key=True)
    link: Mapped[str] = mapped_column(Text, default="")


class FriendLink(_Model, Base):
    """Link to a friendly site."""

    __tablename__ = "friend_links"

    logo: Mapped[Optional[str]] = mapped_column(String(255), ForeignKey("images.url"))
    link: Mapped[str] = mapped_column(Text, default="")
    name: Mapped[str] = mapped_column(Text, default="")
    description: Mapped[str] = mapped_column(Text, default="")

    image: Mapped[Optional[Image]] = relationship(foreign_keys=[logo])


class JwtBlacklist(_Model, Base):
    """Revoked token."""

    __tablename__ = "jwt_blacklists"

    jwt: Mapped[str] = mapped_column(Text, default="")


class Login(_Model, Base):
    """Record of a login."""

    __tablename__ = "logins"

    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"))
    login_method: Mapped[str] = mapped_column(Text, default="")
    ip: Mapped[str] = mapped_column(Text, default="")
    address: Mapped[str] = mapped_column(Text, default="")
    os: Mapped[str] = mapped_column(Text, default="")
    device_info: Mapped[str] = mapped_column(Text, default="")
    browser_info: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[int] = mapped_column(Integer, default=0)

    user: Mapped[Optional[User]] = relationship(foreign_keys=[user_id])