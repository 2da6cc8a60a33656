"""
Auth - Resolve access tokens to identities through Supabase auth
"""
import logging

from supabase import AsyncClient

from habit_duo.core.exceptions import NotAuthenticatedError, RemoteError
from habit_duo.models.user import AuthUser

logger = logging.getLogger(__name__)


async def get_auth_user(client: AsyncClient, access_token: str) -> AuthUser:
    """
    Look up the user owning an access token

    Args:
        client: Supabase client
        access_token: JWT from the Authorization header

    Returns:
        AuthUser with id and email

    Raises:
        NotAuthenticatedError: If the token is missing, invalid or expired
        RemoteError: If the auth service cannot be reached
    """
    if not access_token:
        raise NotAuthenticatedError("Missing access token")

    try:
        response = await client.auth.get_user(access_token)
    except Exception as e:
        # gotrue reports bad tokens as AuthApiError with a 4xx status
        status = getattr(e, "status", None)
        if status is not None and 400 <= int(status) < 500:
            raise NotAuthenticatedError(f"Invalid access token: {e}") from e
        logger.error(f"Auth service error: {e}")
        raise RemoteError(f"Failed to resolve user: {e}") from e

    user = getattr(response, "user", None) if response else None
    if user is None:
        raise NotAuthenticatedError("Invalid access token")

    return AuthUser(id=str(user.id), email=getattr(user, "email", None))
