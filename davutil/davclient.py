#!/usr/bin/env python
"""
The DAV client: request building and response parsing from
davutil.protocol, HTTP from davutil.io.

Example:
    client = DAVClient(
        url="https://dav.example.com/",
        username="user",
        password="pass",
    )
    with client:
        for child in client.list_children("/config/") or []:
            print(child.uri, child.is_collection)
"""
import logging
import os
from typing import Dict, Iterable, List, Optional, Union

from lxml.etree import _Element

from davutil.io import SyncIO
from davutil.io.base import SyncIOProtocol
from davutil.lib.url import URL
from davutil.protocol import (
    ChildResource,
    DAVProtocol,
    DAVResponse,
    Depth,
    MultistatusResult,
)

log = logging.getLogger(__name__)


class DAVClient:
    """
    Synchronous WebDAV client.

    Operations answering "not found" return None; a server reply that
    breaks the multistatus grammar raises a MultistatusError.  Errors
    from the HTTP layer (connection problems, timeouts) propagate as
    they are.
    """

    def __init__(
        self,
        url: str = "",
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0,
        ssl_verify_cert: bool = True,
        headers: Optional[Dict[str, str]] = None,
        namespaces: Iterable[str] = (),
        huge_tree: bool = False,
        io: Optional[SyncIOProtocol] = None,
    ):
        """
        Args:
            url: the server; all paths are taken relative to it
            username, password: credentials for Basic authentication
            timeout: seconds to wait for the server (a string is accepted)
            ssl_verify_cert: False to accept any certificate
            headers: sent along with every request
            namespaces: declared on the root of every request body
            huge_tree: lift the lxml limits on response size
            io: the transport, a requests based SyncIO by default
        """
        if isinstance(timeout, str):
            timeout = float(timeout)
        if isinstance(ssl_verify_cert, str):
            ssl_verify_cert = ssl_verify_cert.lower() not in ("0", "no", "false")
        self.url = URL.objectify(url)
        self.protocol = DAVProtocol(
            base_url=str(url),
            username=username,
            password=password,
            extra_headers=headers,
            namespaces=namespaces,
            huge_tree=huge_tree,
        )
        self.io = io if io is not None else SyncIO(timeout=timeout, verify=ssl_verify_cert)

    def close(self) -> None:
        self.io.close()

    def __enter__(self) -> "DAVClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _execute(self, request) -> DAVResponse:
        response = self.io.execute(request)
        log.debug(
            "%s %s -> %i", request.method.value, request.url, response.status
        )
        return response

    def add_namespace(self, uri: str) -> None:
        """Declare the namespace on all request bodies from now on"""
        self.protocol.add_namespace(uri)

    ## Operations

    def get_properties(
        self,
        path: str,
        props: Optional[Iterable] = None,
    ) -> Optional[ChildResource]:
        """
        PROPFIND with depth 0.

        Args:
            path: Resource path or URL
            props: Properties wanted besides displayname and resourcetype

        Returns:
            The ChildResource, or None if the resource was not found

        Raises:
            MultipleResponsesForSingleResource: The server answered with
                more than one response
        """
        request = self.protocol.propfind_request(path, props, Depth.ZERO)
        response = self._execute(request)
        return self.protocol.parse_get_properties(response)

    def list_children(
        self,
        path: str,
        props: Optional[Iterable] = None,
    ) -> Optional[List[ChildResource]]:
        """
        PROPFIND with depth 1 on a collection.

        Args:
            path: Collection path or URL; a trailing slash is added
            props: Properties wanted besides displayname and resourcetype

        Returns:
            The members of the collection (the collection itself is
            not included), [] if there are none, None if the collection
            was not found
        """
        path = _collection_path(path)
        request = self.protocol.propfind_request(path, props, Depth.ONE)
        response = self._execute(request)
        return self.protocol.parse_list_children(response, path)

    def sync_report(
        self,
        path: str,
        sync_token: Optional[str] = None,
        props: Optional[Iterable] = None,
    ) -> Optional[MultistatusResult]:
        """
        sync-collection REPORT (RFC 6578).

        Args:
            path: Collection path or URL
            sync_token: Token from the previous report, None for an initial sync
            props: Properties wanted besides getetag

        Returns:
            MultistatusResult with the changes and the new sync_token,
            or None on failure
        """
        request = self.protocol.sync_collection_request(path, sync_token, props)
        response = self._execute(request)
        return self.protocol.parse_sync_collection(response)

    def report(
        self,
        path: str,
        body: Union[str, bytes],
        depth: Union[int, str, Depth] = Depth.ZERO,
    ) -> Optional[MultistatusResult]:
        """
        Any REPORT answered with a multistatus.

        Returns:
            MultistatusResult, or None if the status was not 207
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        request = self.protocol.report_request(path, body, depth)
        response = self._execute(request)
        return self.protocol.parse_multistatus(response)

    def proppatch(
        self,
        path: str,
        set_props: Optional[Dict] = None,
        remove_props: Optional[Iterable] = None,
    ) -> Optional[ChildResource]:
        """
        PROPPATCH.  The outcome for each property is in its status.

        Returns:
            ChildResource, or None if the status was not 207
        """
        request = self.protocol.proppatch_request(path, set_props, remove_props)
        response = self._execute(request)
        return self.protocol.parse_proppatch(response)

    def mkcol(
        self,
        path: str,
        displayname: Optional[str] = None,
        resource_types: Optional[Iterable] = None,
    ) -> Optional[MultistatusResult]:
        """
        (Extended) MKCOL.

        Returns:
            MultistatusResult on success (empty unless the server sent a
            mkcol-response), None if the collection was not created
        """
        path = _collection_path(path)
        request = self.protocol.mkcol_request(path, displayname, resource_types)
        response = self._execute(request)
        ret = self.protocol.parse_mkcol(response, path)
        if ret is None:
            self._log_error(response)
        return ret

    def get(self, path: str, headers: Optional[Dict[str, str]] = None) -> DAVResponse:
        """GET path; the raw response is returned whatever the status"""
        return self._execute(self.protocol.get_request(path, headers))

    def put(
        self,
        path: str,
        data: Union[str, bytes],
        content_type: str = "application/xml; charset=utf-8",
        etag: Optional[str] = None,
    ) -> DAVResponse:
        """
        Store data at path.  With an etag, the server should only
        overwrite the resource if it still has that etag.
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        return self._execute(self.protocol.put_request(path, data, content_type, etag))

    def delete(self, path: str, etag: Optional[str] = None) -> DAVResponse:
        return self._execute(self.protocol.delete_request(path, etag))

    def parse_error(self, response: Union[DAVResponse, bytes, str, None]) -> Optional[_Element]:
        """
        The condition element from a DAV:error body, or None.  Meant for
        error messages; never raises.
        """
        if not isinstance(response, DAVResponse):
            response = DAVResponse(status=0, headers={}, body=response)
        return self.protocol.parse_error(response)

    def _log_error(self, response: DAVResponse) -> None:
        condition = self.parse_error(response)
        if condition is not None:
            log.info(
                "%i %s, condition %s", response.status, response.reason, condition.tag
            )


def _collection_path(path: str) -> str:
    if path.endswith("/"):
        return path
    return path + "/"


## Environment variables understood as connection parameters
_ENV_KEYS = ("URL", "USERNAME", "PASSWORD", "TIMEOUT", "SSL_VERIFY_CERT")

## Short forms allowed in config files
_CONFIG_ALIASES = {"user": "username", "pass": "password"}


def _from_environment() -> Dict[str, str]:
    return {
        key.lower(): os.environ["DAVUTIL_" + key]
        for key in _ENV_KEYS
        if os.environ.get("DAVUTIL_" + key)
    }


def _from_config_file(config_file: Optional[str], section: str) -> Dict[str, str]:
    from . import config

    cfg = config.read_config(config_file)
    if not cfg:
        return {}
    conn_params = {}
    for key, value in config.config_section(cfg, section).items():
        if not key.startswith("dav_") or not value:
            continue
        key = key[len("dav_"):]
        conn_params[_CONFIG_ALIASES.get(key, key)] = value
    return conn_params


def get_davclient(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section: Optional[str] = None,
    environment: bool = True,
    **config_data,
) -> Optional[DAVClient]:
    """
    Build a DAVClient from the first source giving connection
    parameters.  Nothing is sent to the server.

    The sources are tried in this order:

    * the keyword arguments, passed on to DAVClient
    * environment variables `DAVUTIL_URL`, `DAVUTIL_USERNAME`,
      `DAVUTIL_PASSWORD`, `DAVUTIL_TIMEOUT`, `DAVUTIL_SSL_VERIFY_CERT`
      (unless environment is False)
    * a config file (see davutil.config).  `DAVUTIL_CONFIG_FILE` and
      `DAVUTIL_CONFIG_SECTION` give the defaults for config_file and
      config_section.  The parameters are the keys prefixed with
      `dav_`, i.e. `dav_url`, `dav_user`, `dav_pass`.

    Returns None if no source had anything.
    """
    if config_data:
        return DAVClient(**config_data)

    if environment:
        conn_params = _from_environment()
        if conn_params:
            return DAVClient(**conn_params)
        config_file = config_file or os.environ.get("DAVUTIL_CONFIG_FILE")
        config_section = config_section or os.environ.get("DAVUTIL_CONFIG_SECTION")

    if check_config_file:
        conn_params = _from_config_file(config_file, config_section or "default")
        if conn_params:
            return DAVClient(**conn_params)

    return None
