"""
Error taxonomy for auto-title.

Categories:
- Configuration: missing credentials/endpoint or invalid settings (never retried)
- Authentication: rejected credentials (terminal, never retried)
- Transient: rate limiting or server faults (retried, then exhaustion)
- Domain: backend answered but produced no usable suggestions
- Naming/apply: rename or front matter patch failed
"""


class AutoTitleError(Exception):
    """Base exception for auto-title errors."""

    category = "error"


class ConfigValidationError(AutoTitleError):
    """Raised when configuration validation fails."""

    category = "configuration"


class ProviderNotConfiguredError(AutoTitleError):
    """Provider is missing required credentials or endpoint."""

    category = "configuration"


class AuthenticationError(AutoTitleError):
    """Backend rejected the configured credentials."""

    category = "authentication"


class TransientServiceError(AutoTitleError):
    """Rate limited or server-side failure."""

    category = "transient"


class RetriesExhaustedError(TransientServiceError):
    """All attempts were used without a terminal answer."""

    def __init__(self, message: str = "Failed after multiple retries", status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ProviderConnectionError(TransientServiceError):
    """Failed to reach the generation backend."""

    pass


class GenerationError(AutoTitleError):
    """Backend returned an error field or zero usable suggestions."""

    category = "domain"


class NamingError(AutoTitleError):
    """Title could not be turned into a usable file name."""

    category = "naming"


class StoreError(AutoTitleError):
    """Document store operation failed."""

    category = "naming"


class DocumentNotFoundError(StoreError):
    """Document does not exist in the store."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Document not found: {identifier}")
