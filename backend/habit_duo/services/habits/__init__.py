"""
Habits module - Core habit functionality
"""
from . import engine
from . import summary
from . import repository

from .engine import (
    OwnershipClass,
    SharedCompletion,
    is_due_on,
    ownership_class,
    habits_for_date,
    completion_status,
    streak,
    shared_completion_display
)
from .repository import HabitsGateway, CompletionsGateway

__all__ = [
    # Modules
    'engine',
    'summary',
    'repository',

    # Engine
    'OwnershipClass',
    'SharedCompletion',
    'is_due_on',
    'ownership_class',
    'habits_for_date',
    'completion_status',
    'streak',
    'shared_completion_display',

    # Gateways
    'HabitsGateway',
    'CompletionsGateway'
]
