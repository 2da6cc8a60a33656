"""
Health Routes - Liveness and session store status
"""
from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Liveness plus whether the session store is up and how many users are signed in"""
    store = getattr(request.app.state, "sessions", None)
    return {
        "status": "ok",
        "sessions_ready": store is not None,
        "active_sessions": store.get_active_session_count() if store is not None else 0
    }
