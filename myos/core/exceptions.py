"""
Error taxonomy shared by the local store, domain operations and sync engine.

Domain and storage errors propagate to the caller (the HTTP layer turns them
into status codes). Remote errors are caught by the sync engine and turned
into a status signal instead.
"""

from typing import Optional


class MyOSError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StorageUnavailable(MyOSError):
    """The local store could not complete a read or write."""


class ValidationError(MyOSError):
    """A domain operation received malformed input. Raised before any write."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFound(MyOSError):
    """An operation addressed a record id that does not exist."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection} record '{record_id}' not found")
        self.collection = collection
        self.record_id = record_id


class RemoteError(MyOSError):
    """Base class for failures talking to the remote backend."""


class RemoteUnreachable(RemoteError):
    """Transport failure or timeout while calling the remote backend."""


class RemoteRejected(RemoteError):
    """The remote backend answered but refused the request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
