#!/usr/bin/env python
import logging
import os
from typing import Any
from typing import Optional

from davutil import __version__

## Environmental variables prepended with "DAVUTIL_" are used both for
## debug purposes and for connection parameters (see davclient.get_davclient)
debug_dump_communication = os.environ.get("DAVUTIL_COMMDUMP", False)
## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("DAVUTIL_DEBUGMODE")
if not debugmode:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("davutil")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def errmsg(r) -> str:
    """Utility for formatting an error response to an error string"""
    return "%s %s\n\n%s" % (r.status, r.reason, r.body)


def weirdness(*reasons):
    from davutil.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class XmlEmitError(DAVError):
    """
    A request body was emitted out of order, i.e. a close tag not
    matching the innermost open tag.  This is a bug in the caller.
    """

    pass


class MultistatusError(DAVError):
    """
    The server sent a response which does not follow the multistatus
    grammar.  The element property holds the offending element (if
    there is one).

    These are never recovered from; they indicate a protocol mismatch
    between client and server.
    """

    element: Any = None

    def __init__(
        self,
        reason: Optional[str] = None,
        element: Any = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(url=url, reason=reason)
        self.element = element

    def __str__(self) -> str:
        ret = super().__str__()
        if self.element is not None:
            tag = getattr(self.element, "tag", self.element)
            ret = "%s (element %s)" % (ret, tag)
        return ret


class UnexpectedRootElement(MultistatusError):
    pass


class MalformedMultistatus(MultistatusError):
    pass


class ConflictingResponseForm(MultistatusError):
    """A response element had both a status and propstat children"""

    pass


class DuplicateError(MultistatusError):
    pass


class BadHttpStatusLine(MultistatusError):
    pass


class MultipleResponsesForSingleResource(MultistatusError):
    pass


class ConfigError(DAVError):
    pass


