"""
Custom exception hierarchy for appdrop-cli.

Per-file and per-host problems are recorded as outcomes, not raised; these
exceptions cover the request-level and configuration-level failures.
"""

class AppdropError(Exception):
    """Base exception for all appdrop-cli errors."""
    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self):
        return self.message


class ConfigurationError(AppdropError):
    """Raised when configuration loading or validation fails."""
    pass


class SelectionError(AppdropError):
    """Raised when a copy request has no usable hosts or selections."""
    pass


class HostError(AppdropError):
    """Raised when host-related operations fail."""
    pass


class DeployError(AppdropError):
    """Raised when a copy batch fails as a whole."""
    pass
