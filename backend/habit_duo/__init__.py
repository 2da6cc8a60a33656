"""
Habit Duo - habit tracking backend for couples
"""
