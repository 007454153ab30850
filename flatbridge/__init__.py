"""flatbridge - one-shot transfers between ClickHouse and delimited files."""

__version__ = "0.1.0"
__package_name__ = "flatbridge"

from .exceptions import (
    FlatBridgeError,
    FormatError,
    PartialTransferError,
    RemoteError,
    StoreConnectionError,
    UnsupportedDirectionError,
    ValidationError,
)

__all__ = [
    "FlatBridgeError",
    "ValidationError",
    "StoreConnectionError",
    "UnsupportedDirectionError",
    "FormatError",
    "RemoteError",
    "PartialTransferError",
]
