"""Exception types raised by Domo."""


class DomoError(Exception):
    """Base class for Domo errors."""


class ConfigError(DomoError):
    """Invalid or missing configuration."""


class NotFoundError(DomoError):
    """A demo, video or conversation does not exist."""


class WebhookAuthError(DomoError):
    """A webhook delivery failed authentication."""


class ConflictError(DomoError):
    """A record already exists with incompatible ownership."""
