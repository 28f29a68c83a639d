from typing import Union


class EndfieldError(Exception):
    """Base class for every error raised by the check-in tool."""


class ConfigError(EndfieldError):
    """No usable account configuration."""


class TransportError(EndfieldError):
    """Network failure or a response body that is not JSON."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


class HandshakeError(EndfieldError):
    """A step of the token -> cred exchange failed."""

    def __init__(self, step: Union[int, str], message: str):
        label = f"OAuth step {step}" if isinstance(step, int) else f"Token {step}"
        super().__init__(f"{label} failed: {message}")
        self.step = step
        self.message = message


class RoleResolutionError(EndfieldError):
    """The binding endpoint could not provide any role."""


class NoBindingError(RoleResolutionError):
    def __init__(self, message: str = "No Endfield account binding found"):
        super().__init__(message)


class NoRolesError(RoleResolutionError):
    def __init__(self, message: str = "No roles found in binding"):
        super().__init__(message)


class ClaimFailed(EndfieldError):
    """Attendance check or claim returned a non-zero code."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotificationError(EndfieldError):
    """The webhook refused or never received the report."""
