class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationError(AppError):
    """Raised when input is malformed or logically inconsistent."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ImmutableProposalError(ValidationError):
    """Raised when a mutation targets a proposal that is already approved."""
    def __init__(self, message: str, status: str = "approved"):
        super().__init__(message, details={"status": status})

class NotFoundError(AppError):
    """Raised when a resource is absent or belongs to another school."""
    def __init__(self, message: str):
        super().__init__(message, status_code=404)
