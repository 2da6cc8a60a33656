"""
Dependency injection for shared clients and resources
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from supabase import acreate_client, AsyncClient

from habit_duo.core.config import settings
from habit_duo.core.exceptions import NotAuthenticatedError, RemoteError
from habit_duo.services.session import HabitSession, SessionStore


async def get_supabase_client(access_token: Optional[str] = None) -> AsyncClient:
    """
    Get an async Supabase client

    Args:
        access_token: Optional user JWT; when given, table queries run as that
            user so row-level security applies

    Returns:
        AsyncClient instance
    """
    client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    if access_token:
        client.postgrest.auth(access_token)
    return client


def get_session_store(request: Request) -> SessionStore:
    """Session store created in the application lifespan"""
    return request.app.state.sessions


def get_access_token(authorization: Optional[str] = Header(default=None)) -> str:
    """Extract the bearer token from the Authorization header"""
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Authorization header must be 'Bearer <token>'")
    return token.strip()


async def get_habit_session(
    access_token: str = Depends(get_access_token),
    store: SessionStore = Depends(get_session_store)
) -> HabitSession:
    """Habit session of the caller, created on first use"""
    try:
        return await store.get_or_create_session(access_token)
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except RemoteError as e:
        raise HTTPException(status_code=500, detail=str(e))
