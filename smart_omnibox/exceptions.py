"""Service-level exceptions"""


class OmniboxError(Exception):
    """Base error for the smart omnibox service"""

    status_code = 500


class InputValidationError(OmniboxError):
    """Raised when request input is missing or malformed"""

    status_code = 400


class ChatBackendError(OmniboxError):
    """Raised when the chat completion backend cannot answer"""
