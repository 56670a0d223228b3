"""
User session endpoints: login, logout and current user.

Registration, e-mail verification and password reset pages belong to the
web front end; accounts can also be created with `lastheard create-user`.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lastheard.core import get_db, get_settings
from lastheard.core.auth import (
    create_session, delete_session, get_current_user, verify_password
)
from lastheard.models import User
from lastheard.schemas import LoginRequest, MessageResponse, UserOut

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/user", tags=["User"])
settings = get_settings()


@router.post(
    "/login",
    response_model=UserOut,
    summary="Log In",
    description="Check callsign and password and start a session. The session token is set as an HTTP-only cookie.",
    responses={401: {"description": "Wrong callsign or password"}, 403: {"description": "Account disabled"}},
)
async def login(body: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    callsign = body.callsign.strip().upper()
    result = await db.execute(select(User).where(func.upper(User.callsign) == callsign))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.password_hash):
        logger.info(f"Failed login for {callsign}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid callsign or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

    session = await create_session(db, user)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.session_token,
        max_age=settings.session_ttl_days * 86400,
        httponly=True,
        samesite="lax",
    )
    logger.info(f"User {user.callsign} logged in")
    return user


@router.post("/logout", response_model=MessageResponse, summary="Log Out")
async def logout(request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        await delete_session(db, token)
    response.delete_cookie(settings.session_cookie_name)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserOut, summary="Current User")
async def me(user: User = Depends(get_current_user)):
    return user
