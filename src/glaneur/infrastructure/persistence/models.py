"""
SQLAlchemy models for Glaneur persistence.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""


class UserModel(Base):
    """User database model - Web3 wallet-based identity."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    wallet_address: Mapped[str] = mapped_column(
        String(44), unique=True, index=True, nullable=False
    )
    display_name: Mapped[str] = mapped_column(String(64), nullable=False)
    slug: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    # Relationships
    wallets: Mapped[list["UserWalletModel"]] = relationship(
        "UserWalletModel",
        back_populates="user",
        lazy="select",
        cascade="all, delete-orphan",
    )


class UserWalletModel(Base):
    """Wallet linked to a user."""

    __tablename__ = "user_wallets"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), index=True, nullable=False
    )
    address: Mapped[str] = mapped_column(String(44), unique=True, nullable=False)
    label: Mapped[str | None] = mapped_column(String(64))
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    user: Mapped["UserModel"] = relationship("UserModel", back_populates="wallets")


class PostModel(Base):
    """
    Post database model.

    Owned by the content service; only the columns the collect pipeline
    reads are mapped.
    """

    __tablename__ = "posts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), index=True, nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="post")
    metadata_url: Mapped[str | None] = mapped_column(Text)
    nft_name: Mapped[str | None] = mapped_column(String(64))
    seller_fee_basis_points: Mapped[int | None] = mapped_column(Integer)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    author: Mapped["UserModel"] = relationship("UserModel", lazy="joined")


class CollectionModel(Base):
    """Collect attempt for one (post, user) pair."""

    __tablename__ = "collections"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_collections_post_user"),
        Index("ix_collections_status_created_at", "status", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    post_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("posts.id"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), index=True, nullable=False
    )
    wallet_address: Mapped[str] = mapped_column(String(44), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    tx_signature: Mapped[str | None] = mapped_column(String(88), index=True)
    asset_id: Mapped[str | None] = mapped_column(String(44))
    client_ip: Mapped[str | None] = mapped_column(String(45))
    last_valid_block_height: Mapped[int | None] = mapped_column(BigInteger)
    failure_reason: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now
    )
