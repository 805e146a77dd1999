"""
HTTP transport for davutil.protocol.

The transport only moves DAVRequests and DAVResponses over the wire;
building and parsing the XML is done in davutil.protocol::

    protocol = DAVProtocol(base_url="https://dav.example.com")
    with SyncIO() as io:
        response = io.execute(protocol.propfind_request("/config/", depth=1))
        children = protocol.parse_list_children(response, "/config/")
"""

from .base import SyncIOProtocol
from .sync import SyncIO

__all__ = ["SyncIOProtocol", "SyncIO"]
