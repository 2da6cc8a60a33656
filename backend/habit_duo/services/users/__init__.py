"""
Users module - Profiles, partner lookup and auth identities
"""
from . import repository
from . import auth

from .repository import UsersGateway, default_profile_name
from .auth import get_auth_user

__all__ = [
    'repository',
    'auth',
    'UsersGateway',
    'default_profile_name',
    'get_auth_user'
]
