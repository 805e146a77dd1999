"""
Blocking HTTP transport on top of requests.
"""

import datetime
import logging
from tempfile import NamedTemporaryFile
from typing import Optional

import requests

from davutil.lib import error
from davutil.protocol.types import DAVRequest, DAVResponse

log = logging.getLogger(__name__)


class SyncIO:
    """
    Sends DAVRequests with a requests.Session.  Transport failures
    (connection refused, timeouts) are raised as the requests
    exceptions; HTTP error statuses are just responses.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        verify: bool = True,
    ):
        """
        Args:
            session: a session to share; one is created (and owned) if not given
            timeout: seconds to wait for the server
            verify: False to accept any certificate
        """
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.verify = verify

    def execute(self, request: DAVRequest) -> DAVResponse:
        log.debug("sending %s %s", request.method.value, request.url)
        r = self.session.request(
            request.method.value,
            request.url,
            headers=request.headers,
            data=request.body,
            timeout=self.timeout,
            verify=self.verify,
        )
        response = DAVResponse(
            status=r.status_code, headers=dict(r.headers), body=r.content
        )
        if error.debug_dump_communication:
            dump_communication(request, response)
        return response

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "SyncIO":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _headers(headers) -> bytes:
    return "".join("%s: %s\n" % (k, v) for k, v in headers.items()).encode("utf-8")


def dump_communication(request: DAVRequest, response: DAVResponse) -> str:
    """
    Write the request and the response to a temporary file, for
    debugging servers.  Returns the file name.
    """
    with NamedTemporaryFile(prefix="davutilcomm", delete=False) as commlog:
        commlog.write(b"=" * 80 + b"\n")
        commlog.write(datetime.datetime.now().isoformat().encode("utf-8"))
        commlog.write(b"\n====>\n")
        commlog.write(("%s %s\n" % (request.method.value, request.url)).encode("utf-8"))
        commlog.write(_headers(request.headers) + b"\n")
        commlog.write(request.body or b"")
        commlog.write(b"\n<====\n")
        commlog.write(("%i %s\n" % (response.status, response.reason)).encode("utf-8"))
        commlog.write(_headers(response.headers) + b"\n")
        commlog.write(response.body or b"")
    log.debug("communication dumped to %s", commlog.name)
    return commlog.name
