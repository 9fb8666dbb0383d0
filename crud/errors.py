from contextlib import asynccontextmanager
from pymongo.errors import (
    AutoReconnect,
    ConnectionFailure,
    NetworkTimeout,
    PyMongoError,
    ServerSelectionTimeoutError,
)

UNREACHABLE_ERRORS = (ConnectionFailure, ServerSelectionTimeoutError, NetworkTimeout, AutoReconnect)


class StoreError(Exception):
    """Base class for failures reported by the clinic store."""

    def __init__(self, message: str, operation: str = ""):
        super().__init__(message)
        self.message = message
        self.operation = operation


class StoreUnreachable(StoreError):
    """The store could not be reached at all (network down, server paused)."""


class StoreRejected(StoreError):
    """The store answered but refused the operation."""


@asynccontextmanager
async def store_operation(operation: str):
    """Translate driver exceptions raised inside the block into StoreError."""
    try:
        yield
    except StoreError:
        raise
    except UNREACHABLE_ERRORS as e:
        raise StoreUnreachable(str(e), operation) from e
    except PyMongoError as e:
        raise StoreRejected(str(e), operation) from e
