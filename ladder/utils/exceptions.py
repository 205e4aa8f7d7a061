"""
Custom exceptions for the rating ladder with user-friendly error messages.
"""

class LadderException(Exception):
    """Base exception for ladder-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class NotFoundError(LadderException):
    """Raised when a referenced user or challenge does not exist."""
    def __init__(self, kind: str, record_id: str):
        super().__init__(
            f"{kind.capitalize()} '{record_id}' not found",
            f"{kind.capitalize()} not found"
        )
        self.kind = kind
        self.record_id = record_id

class InvalidArgumentError(LadderException):
    """Raised when request data fails validation."""
    def __init__(self, reason: str):
        super().__init__(f"Invalid argument: {reason}", reason)
        self.reason = reason

class InvalidTransitionError(LadderException):
    """Raised when a challenge cannot move from its current status."""
    def __init__(self, challenge_id: str, current_status: str, action: str, user_message: str = None):
        super().__init__(
            f"Challenge '{challenge_id}' is {current_status}, cannot {action}",
            user_message or f"Challenge is {current_status}, cannot {action}"
        )
        self.challenge_id = challenge_id
        self.current_status = current_status
        self.action = action

class ConflictError(InvalidTransitionError):
    """Raised when deleting a challenge that is a durable record."""
    def __init__(self, challenge_id: str, current_status: str):
        super().__init__(
            challenge_id,
            current_status,
            "delete",
            "Cannot delete accepted or completed challenges"
        )
