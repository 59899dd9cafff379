class LDAPError(Exception):
    """Base exception for directory errors, carrying the server code and message."""

    def __init__(self, message: str, code: int = 0):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return f"Error code {self.code}: {self.message}"

class LDAPConfigurationError(LDAPError):
    """Raised when required connection parameters are missing."""
    pass

class LDAPConnectionError(LDAPError):
    """Raised when the directory server cannot be reached."""
    pass

class LDAPBindError(LDAPError):
    """Raised when the server rejects the bind credentials."""
    pass

class LDAPOperationError(LDAPError):
    """Raised when a search, add, modify, delete or rename fails."""
    pass
