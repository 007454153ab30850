"""Exception hierarchy for flatbridge.

Every error carries the HTTP status the API boundary answers with, so the
routes never need to know which layer raised.
"""

from typing import Optional


class FlatBridgeError(Exception):
    """Base exception for transfer-related errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(FlatBridgeError):
    """Bad or missing input supplied by the caller."""

    status_code = 400


class StoreConnectionError(FlatBridgeError):
    """A store session could not be opened from the supplied configuration."""

    status_code = 400


class UnsupportedDirectionError(FlatBridgeError):
    """The requested source/destination pairing is not implemented."""

    status_code = 400

    def __init__(self, source_kind: str, destination_kind: str):
        self.source_kind = source_kind
        self.destination_kind = destination_kind
        super().__init__(
            f"Unsupported transfer direction: {source_kind} -> {destination_kind}"
        )


class FormatError(FlatBridgeError):
    """Malformed or empty delimited input."""

    status_code = 400


class RemoteError(FlatBridgeError):
    """The remote store rejected a query or insert, or was unreachable."""

    status_code = 500


class PartialTransferError(RemoteError):
    """A batch failed after earlier batches were already written.

    The destination keeps the confirmed rows; nothing is rolled back.
    """

    def __init__(
        self,
        message: str,
        records_processed: int,
        destination: Optional[str] = None,
    ):
        self.records_processed = records_processed
        self.destination = destination
        super().__init__(
            f"{message} ({records_processed} records written before the failure)"
        )
