"""
Custom exceptions for the Team Competition stats bot with user-friendly error messages.
"""

class TcStatsException(Exception):
    """Base exception for Team Competition errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class NotFoundError(TcStatsException):
    """Raised when a referenced hardware, team or user does not exist."""
    entity = "Entity"

    def __init__(self, entity_id):
        self.entity_id = entity_id
        super().__init__(
            f"{self.entity} with ID '{entity_id}' not found",
            f"❌ {self.entity} '{entity_id}' not found!"
        )

class HardwareNotFoundError(NotFoundError):
    entity = "Hardware"

class TeamNotFoundError(NotFoundError):
    entity = "Team"

class UserNotFoundError(NotFoundError):
    entity = "User"

class ExternalConnectionError(TcStatsException):
    """Raised when an external stats or hardware source cannot be reached or returns bad data."""
    def __init__(self, url: str, details: str = None):
        self.url = url
        super().__init__(
            f"Error connecting to '{url}': {details}",
            "❌ An external stats service is unavailable. Please try again later."
        )

class SystemStateError(TcStatsException):
    """Raised when the current system state blocks the requested operation."""
    def __init__(self, state, operation: str = "read"):
        self.state = state
        super().__init__(
            f"Cannot {operation} while system state is {state.name}",
            f"❌ Stats are currently being updated ({state.name.lower().replace('_', ' ')}). Please try again shortly."
        )

class InvalidStatsOffsetError(TcStatsException, ValueError):
    """Raised when an offset cannot be derived with the given hardware multiplier."""
    def __init__(self, multiplier: float):
        super().__init__(
            f"Cannot derive offset with non-positive multiplier: {multiplier}",
            "❌ The user's hardware has an invalid multiplier."
        )
