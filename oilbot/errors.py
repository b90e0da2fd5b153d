"""
Exceptions for OilFacts bot.

User input problems are reported back to the customer as a re-prompt,
collaborator failures are logged and degraded, configuration problems are
logged at startup and surface again only when the affected collaborator is used.
"""


class OilBotError(Exception):
    """Base exception for all bot errors."""

    pass


class ValidationError(OilBotError):
    """Raised when customer input does not fit the current step."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(OilBotError):
    """Raised when a collaborator is used without the credentials it needs."""

    pass


class CollaboratorError(OilBotError):
    """Base for failures of messaging, payment, email or media services."""

    def __init__(self, service: str, detail: str | None = None):
        self.service = service
        self.detail = detail
        msg = f"{service} failed"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class AuthExpired(CollaboratorError):
    """Raised when a service rejects our token or credentials."""

    pass


class TransientFailure(CollaboratorError):
    """Raised on network errors and unexpected service responses."""

    pass


class NotFound(CollaboratorError):
    """Raised when a service reports that the requested object does not exist."""

    pass
