"""
Business logic services
"""
from . import habits
from . import users
from . import messages
from . import session

__all__ = [
    'habits',
    'users',
    'messages',
    'session'
]
