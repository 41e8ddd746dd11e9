from datetime import datetime, timezone  # For timestamp fields
from typing import Optional  # For optional fields

from sqlalchemy import DateTime, Integer, text  # For SQL expressions and explicit column types
from sqlmodel import Column, Field, Index, SQLModel, String  # For ORM and table definition


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _next_lock_version(current: Optional[int]) -> int:
    # Inserts start at 0, every UPDATE bumps by one
    return 0 if current is None else current + 1


# Shared with __mapper_args__ so the ORM guards UPDATEs with it
_lock_version_column = Column(
    "lock_version", Integer, nullable=False, server_default=text("0")
)


class User(SQLModel, table=True):
    """Represents the persisted User record the confirmation flow works on.

    The record is owned by the persistence layer; confirmation services read
    and mutate its columns but never hold on to storage themselves. Transient
    per-instance state (raw token, one-shot flags, field errors) lives on the
    `ConfirmableUser` aggregate wrapping this entity.

    Attributes:
        id: The unique identifier for the user (primary key).
        phone: The current, confirmed phone number. Unique.
        unconfirmed_phone: A new phone number awaiting confirmation. Only set
            while a reconfirmation is pending; copied into `phone` and cleared
            on successful confirmation.
        phone_confirmation_token: The outstanding confirmation token, unique
            across all records.
        phone_confirmed_at: When the phone was confirmed. Non-null means
            confirmed and it is never cleared by the confirmation flow.
        phone_confirmation_sent_at: When the current token was generated
            (not when it was delivered).
        is_active: Base account eligibility; inactive users cannot sign in
            regardless of their confirmation state.
        lock_version: Optimistic concurrency counter. The mapper's version
            column: every UPDATE is issued ``WHERE lock_version = <loaded>``
            and bumps it, so a concurrent write fails the flush instead of
            overwriting the row.
        created_at: The timestamp of when the user record was created.
    """

    __tablename__ = "users"

    id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="The unique identifier for the user.",
    )
    phone: Optional[str] = Field(
        default=None,
        sa_column=Column(String(32), unique=True, index=True, nullable=True),
        description="Current confirmed phone number.",
    )
    unconfirmed_phone: Optional[str] = Field(
        default=None,
        sa_column=Column(String(32), nullable=True),
        description="Pending phone number awaiting confirmation.",
    )
    phone_confirmation_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), unique=True, index=True, nullable=True),
        description="Current outstanding confirmation token.",
    )
    phone_confirmed_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
        description="When the phone number was confirmed.",
    )
    phone_confirmation_sent_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
        description="When the current confirmation token was generated.",
    )
    is_active: bool = Field(
        default=True,
        description="Indicates if the account is active. Inactive users cannot sign in.",
    )
    lock_version: int = Field(
        default=0,
        sa_column=_lock_version_column,
        description="Optimistic concurrency counter.",
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        description="The timestamp of when the user record was created.",
    )

    __table_args__ = (
        Index("ix_users_unconfirmed_phone", "unconfirmed_phone"),
        {"extend_existing": True},
    )
    __mapper_args__ = {
        "version_id_col": _lock_version_column,
        "version_id_generator": _next_lock_version,
    }
