# services/chat/exceptions.py

class CompletionError(Exception):
    """Base exception for all completion backend errors."""
    pass

class CompletionNotConfiguredError(CompletionError):
    """Raised when no backend credential is configured."""
    pass

class CompletionBackendError(CompletionError):
    """Raised when the backend call fails (network error, rejected request)."""
    pass

class BadCompletionResponseError(CompletionError):
    """Raised when the backend returns an empty or malformed completion."""
    pass
