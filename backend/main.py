"""
FastAPI Application Entry Point
"""
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from habit_duo.core.config import settings
from habit_duo.core.dependencies import get_supabase_client
from habit_duo.routes import habits, health, messages, session
from habit_duo.services.session import SessionStore

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Silence noisy third-party loggers
logging.getLogger('httpx').setLevel(logging.WARNING)
logging.getLogger('httpcore').setLevel(logging.WARNING)
logging.getLogger('hpack').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager for startup/shutdown events
    """
    # Startup
    app.state.sessions = SessionStore(client_factory=get_supabase_client)
    logger.info("✓ Session store ready")

    yield

    # Shutdown
    try:
        await app.state.sessions.close_all()
        logger.info("✓ All sessions closed")
    except Exception as e:
        logger.warning(f"Error closing sessions: {e}")


# Initialize FastAPI app with lifespan
app = FastAPI(
    title="Habit Duo API",
    version="0.1.0",
    lifespan=lifespan
)

# Register routes
app.include_router(health.router)
app.include_router(session.router)
app.include_router(habits.router)
app.include_router(messages.router)
