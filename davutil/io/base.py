"""
The interface between DAVClient and the HTTP transport.
"""

from typing import Protocol, runtime_checkable

from davutil.protocol.types import DAVRequest, DAVResponse


@runtime_checkable
class SyncIOProtocol(Protocol):
    """
    Anything sending a DAVRequest and giving back the DAVResponse.
    Timeouts, retries and connection reuse are up to the
    implementation.
    """

    def execute(self, request: DAVRequest) -> DAVResponse:
        ...

    def close(self) -> None:
        ...
