#!/usr/bin/env python
"""
Hrefs in a multistatus come back as absolute paths or as full URLs,
quoted or not, and collections with or without the trailing slash.
The URL class hides those differences.
"""
from typing import Any
from typing import Optional
from typing import Union
from urllib.parse import ParseResult
from urllib.parse import quote
from urllib.parse import SplitResult
from urllib.parse import unquote
from urllib.parse import urlparse
from urllib.parse import urlunparse

DEFAULT_PORTS = {"https": 443, "http": 80}


class URL:
    """
    A URL or a path.  Everything accepting a URL takes a URL object,
    a string or a urllib ParseResult.  The attributes of ParseResult
    (scheme, netloc, path, hostname, port, username ...) can be read
    directly from the object.

    Two URLs are equal if they are equal after canonical(), so
    "https://dav.example.com/a%20b/" == "https://me@dav.example.com:443/a b/"
    """

    def __init__(self, url: Union[str, ParseResult, SplitResult]) -> None:
        if isinstance(url, (ParseResult, SplitResult)):
            url = url.geturl()
        self._raw: str = url
        self._parsed: Optional[ParseResult] = None

    @classmethod
    def objectify(
        cls, url: Union["URL", str, ParseResult, SplitResult, None]
    ) -> Optional["URL"]:
        if url is None or isinstance(url, URL):
            return url
        return cls(url)

    @property
    def parsed(self) -> ParseResult:
        if self._parsed is None:
            self._parsed = urlparse(self._raw)
        return self._parsed

    def __getattr__(self, attr: str) -> Any:
        ## private and dunder lookups (i.e. from pickle) must not end up
        ## in the parse result
        if attr.startswith("_"):
            raise AttributeError(attr)
        return getattr(self.parsed, attr)

    def __str__(self) -> str:
        return self._raw

    def __repr__(self) -> str:
        return "URL(%s)" % self._raw

    def __bool__(self) -> bool:
        return bool(self._raw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (URL, str, ParseResult, SplitResult)):
            return NotImplemented
        other = URL.objectify(other)
        if str(self) == str(other):
            return True
        return str(self.canonical()) == str(other.canonical())

    def __hash__(self) -> int:
        return hash(str(self.canonical()))

    def _clean_path(self) -> str:
        path = unquote(self.path)
        while "//" in path:
            path = path.replace("//", "/")
        return path

    def canonical(self) -> "URL":
        """
        Credentials removed, explicit scheme and port, no double
        slashes and a consistently quoted path.
        """
        scheme = self.scheme or "https"
        netloc = ""
        if self.hostname:
            port = self.port or DEFAULT_PORTS.get(scheme)
            netloc = self.hostname if port is None else "%s:%i" % (self.hostname, port)
        return URL(
            urlunparse(
                (
                    scheme,
                    netloc,
                    quote(self._clean_path()),
                    self.params,
                    self.query,
                    self.fragment,
                )
            )
        )

    def same_path(self, other: Any) -> bool:
        """
        True if both point to the same path.  Server details, quoting
        and a trailing slash are not considered.
        """
        other = URL.objectify(other)
        if other is None:
            return False
        return self._clean_path().rstrip("/") == other._clean_path().rstrip("/")

    def with_trailing_slash(self) -> "URL":
        if self.path.endswith("/"):
            return self
        return URL(self.parsed._replace(path=self.path + "/"))

    def strip_trailing_slash(self) -> "URL":
        if not self.path.endswith("/"):
            return self
        return URL(self.parsed._replace(path=self.path.rstrip("/")))

    def join(self, path: Any) -> "URL":
        """
        Resolve path relative to this URL, which is taken to be a
        collection.  An absolute path replaces the path of self,
        a relative one is appended to it.  Joining with a URL on
        another server raises a ValueError.
        """
        if path is None or not str(path):
            return self
        other = URL.objectify(path)
        for attr in ("scheme", "hostname", "port"):
            mine = getattr(self, attr)
            theirs = getattr(other, attr)
            if mine and theirs and mine != theirs:
                raise ValueError("%s can't be joined with %s" % (self, other))

        if other.path.startswith("/"):
            new_path = other.path
        elif self.path.endswith("/"):
            new_path = self.path + other.path
        else:
            new_path = "%s/%s" % (self.path, other.path)
        return URL(
            ParseResult(
                self.scheme or other.scheme,
                self.netloc or other.netloc,
                new_path,
                other.params,
                other.query,
                other.fragment,
            )
        )
