"""
Session module - Per-user aggregation of habit data
"""
from .service import HabitSession
from .store import SessionStore, build_session

__all__ = ['HabitSession', 'SessionStore', 'build_session']
