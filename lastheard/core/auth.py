"""
Authentication helpers and FastAPI dependencies.

Browsers authenticate with the session cookie created at login; scripts send
an API key in the X-API-Key header. Both resolve to an AuthContext.
"""
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from passlib.context import CryptContext
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from lastheard.core.config import get_settings
from lastheard.core.database import get_db
from lastheard.models import ApiKey, User, UserSession

logger = logging.getLogger(__name__)
settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        return False


def generate_token() -> str:
    """Random token for sessions and API keys."""
    return secrets.token_hex(32)


@dataclass
class AuthContext:
    """Who is calling an authenticated endpoint."""
    user: Optional[User] = None
    api_key: Optional[ApiKey] = None


async def create_session(db: AsyncSession, user: User) -> UserSession:
    now = int(time.time())
    session = UserSession(
        user_id=user.id,
        session_token=generate_token(),
        expires_at=now + settings.session_ttl_days * 86400,
        created_at=now,
    )
    user.last_login_at = now
    db.add(session)
    await db.commit()
    return session


async def delete_session(db: AsyncSession, token: str) -> None:
    await db.execute(delete(UserSession).where(UserSession.session_token == token))
    await db.commit()


async def resolve_session(db: AsyncSession, token: str) -> User:
    """Return the user behind a session token or raise 401/403."""
    result = await db.execute(
        select(UserSession, User)
        .join(User, User.id == UserSession.user_id)
        .where(UserSession.session_token == token)
    )
    row = result.first()
    if row is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session")

    session, user = row
    if session.expires_at < int(time.time()):
        await delete_session(db, token)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")
    return user


async def resolve_api_key(db: AsyncSession, key: str) -> ApiKey:
    """Return the active API key record or raise 401/403."""
    result = await db.execute(select(ApiKey).where(ApiKey.api_key == key))
    api_key = result.scalar_one_or_none()
    if api_key is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    now = int(time.time())
    if not api_key.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="API key is inactive")
    if api_key.expires_at is not None and api_key.expires_at < now:
        api_key.is_active = False
        await db.commit()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="API key has expired")

    api_key.last_used_at = now
    await db.commit()
    return api_key


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    """Dependency: the logged-in user from the session cookie."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not logged in")
    return await resolve_session(db, token)


async def require_api_access(
    request: Request,
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Dependency: accept either an API key header or a session cookie."""
    if x_api_key:
        return AuthContext(api_key=await resolve_api_key(db, x_api_key))

    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return AuthContext(user=await resolve_session(db, token))

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="API key or login required",
    )
