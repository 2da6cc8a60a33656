"""
Messages module - Motivational messages
"""
from . import repository
from .repository import MessagesGateway

__all__ = ['repository', 'MessagesGateway']
