"""Error types for the backend admin API client."""


class BackendError(Exception):
    """Base class for failures talking to the backend admin API."""


class ConnectivityError(BackendError):
    """The pre-flight probe did not succeed; credentials are likely stale."""


class ListingError(BackendError):
    """A listing query for one class did not return usable data."""
