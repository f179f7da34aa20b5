"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ConfigurationError(DomainException):
    """A required setting (the CRM credential) is missing"""

    pass


class UpstreamError(DomainException):
    """CRM API returned a non-success status or could not be reached"""

    def __init__(self, operation: str, status_code: int | None = None, detail: str = ""):
        self.operation = operation
        self.status_code = status_code
        self.detail = detail
        status = status_code if status_code is not None else "no response"
        super().__init__(f"HubSpot API error during {operation}: {status}")
