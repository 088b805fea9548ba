class SkipAutomatorError(Exception):
    """Base exception for Coreason Skip Automator."""

    pass


class ScmError(SkipAutomatorError):
    """Base exception for GitHub related errors."""

    pass


class NetworkError(ScmError):
    """Exception raised for network-related SCM errors (timeouts, connection refused)."""

    pass


class AuthError(ScmError):
    """Exception raised for authentication or permission errors."""

    pass


class ConfigurationError(SkipAutomatorError):
    """Exception raised when the presubmit configuration cannot be resolved."""

    pass


class WebhookError(SkipAutomatorError):
    """Exception raised for malformed or unauthenticated webhook deliveries."""

    pass


class SkipCommandError(SkipAutomatorError):
    """
    Exception raised when a /skip invocation aborts after reporting the failure on the PR.
    """

    def __init__(self, message: str, context: str = "") -> None:
        super().__init__(message)
        self.context = context
