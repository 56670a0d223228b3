"""
SQLAlchemy database models.

Call record column names are a fixed, case-sensitive contract shared with the
rest of the last-heard application, so they are mapped explicitly while the
Python attributes stay snake_case.
"""
import time
from typing import Optional

from sqlalchemy import (
    BigInteger, Boolean, ForeignKey, Index, Integer, String, Text
)
from sqlalchemy.orm import Mapped, mapped_column

from lastheard.core.database import Base

# BIGINT primary keys are not rowid aliases in SQLite, so they would never autoincrement
IdType = BigInteger().with_variant(Integer(), "sqlite")


def epoch_now() -> int:
    """Current time as integer unix seconds."""
    return int(time.time())


class CallRecord(Base):
    """One completed radio transmission heard on the network."""
    __tablename__ = "lastheard"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    source_id: Mapped[int] = mapped_column("SourceID", BigInteger, nullable=False)
    destination_id: Mapped[int] = mapped_column("DestinationID", BigInteger, nullable=False)
    source_call: Mapped[str] = mapped_column("SourceCall", String(32), nullable=False)
    source_name: Mapped[Optional[str]] = mapped_column("SourceName", String(128))
    destination_call: Mapped[Optional[str]] = mapped_column("DestinationCall", String(32))
    destination_name: Mapped[str] = mapped_column("DestinationName", String(128), nullable=False)
    start: Mapped[int] = mapped_column("Start", BigInteger, nullable=False)
    stop: Mapped[int] = mapped_column("Stop", BigInteger, nullable=False)
    talker_alias: Mapped[Optional[str]] = mapped_column("TalkerAlias", String(128))
    duration: Mapped[int] = mapped_column("duration", Integer, nullable=False)
    created_at: Mapped[int] = mapped_column("created_at", BigInteger, default=epoch_now)

    __table_args__ = (
        Index("idx_lastheard_start", "Start"),
        Index("idx_lastheard_sourceid", "SourceID"),
        Index("idx_lastheard_destinationid", "DestinationID"),
        Index("idx_lastheard_sourcecall", "SourceCall"),
    )


class Talkgroup(Base):
    """Talkgroup directory entry refreshed daily from Brandmeister."""
    __tablename__ = "talkgroups"

    talkgroup_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[Optional[str]] = mapped_column(String(16), index=True)
    continent: Mapped[Optional[str]] = mapped_column(String(32), index=True)
    full_country_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_updated: Mapped[int] = mapped_column(BigInteger, default=epoch_now)


class User(Base):
    """Registered operator account."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    callsign: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(128))
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[int] = mapped_column(BigInteger, default=epoch_now)
    last_login_at: Mapped[Optional[int]] = mapped_column(BigInteger)


class UserSession(Base):
    """Browser login session, referenced by the session cookie."""
    __tablename__ = "user_sessions"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    session_token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    created_at: Mapped[int] = mapped_column(BigInteger, default=epoch_now)


class ApiKey(Base):
    """API key for programmatic access to the authenticated endpoints."""
    __tablename__ = "api_keys"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    api_key: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[int] = mapped_column(BigInteger, default=epoch_now)
    expires_at: Mapped[Optional[int]] = mapped_column(BigInteger, index=True)
    last_used_at: Mapped[Optional[int]] = mapped_column(BigInteger)


class PasswordResetToken(Base):
    """One-time password reset token."""
    __tablename__ = "password_reset_tokens"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    created_at: Mapped[int] = mapped_column(BigInteger, default=epoch_now)


class EmailChangeToken(Base):
    """Pending e-mail address change awaiting confirmation."""
    __tablename__ = "email_change_tokens"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    new_email: Mapped[str] = mapped_column(String(255), nullable=False)
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    created_at: Mapped[int] = mapped_column(BigInteger, default=epoch_now)
