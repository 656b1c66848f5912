"""Exceptions raised by the sync pipeline. All of them are fatal to a run."""


class SyncError(Exception):
    """Base class for errors that abort a sync run."""
    pass


class ConfigurationError(SyncError):
    """A required setting or secret is missing or invalid."""
    pass


class AuthenticationError(SyncError):
    """The token endpoint rejected the client credentials."""
    pass


class FetchError(SyncError):
    """A catalog page request failed or returned something unusable."""
    pass
