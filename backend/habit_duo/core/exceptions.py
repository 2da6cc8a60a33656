"""
Custom Exceptions - Application-specific error types
"""


class HabitDuoException(Exception):
    """Base exception for all habit duo errors"""
    pass


class RemoteError(HabitDuoException):
    """Raised when talking to the remote store fails (network, auth, constraint violation)"""
    pass


class NotAuthenticatedError(HabitDuoException):
    """Raised when an operation needs an authenticated identity and there is none"""
    pass


class NotFoundError(HabitDuoException):
    """Raised when a habit cannot be found on a read-by-id path"""
    pass


class InvalidRowError(HabitDuoException):
    """Raised when a row from the store does not match the expected schema"""

    def __init__(self, table: str, row, reason: str):
        self.table = table
        self.row = row
        self.reason = reason
        super().__init__(f"Invalid {table} row {row.get('id') if isinstance(row, dict) else row!r}: {reason}")


class InvalidHabitDataError(HabitDuoException):
    """Raised when habit data validation fails"""
    pass


class HabitPermissionError(HabitDuoException):
    """Raised when a user tries to edit or delete a habit they did not create"""
    pass
