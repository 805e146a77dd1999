#!/usr/bin/env python
"""
Configuration documents kept on a DAV server.

Each configuration is an XML document named ``<name>.xml`` inside a
collection; sub-collections are stores of their own.  The server needs
nothing beyond GET, PUT, PROPFIND and MKCOL.
"""
import logging
from typing import List, Optional, Union

from lxml import etree
from lxml.etree import _Element

from davutil.davclient import DAVClient
from davutil.lib import error
from davutil.lib.url import URL

log = logging.getLogger(__name__)


class ConfigurationDavStore:
    def __init__(self, url: str, client: Optional[DAVClient] = None) -> None:
        """
        Args:
            url: URL of the collection holding the configurations
            client: DAVClient to use, a new one for url if not given
        """
        if not url.endswith("/"):
            url += "/"
        self.url = URL.objectify(url)
        self.path = self.url.path or "/"
        self.client = client if client is not None else DAVClient(url=url)

    def read_only(self) -> bool:
        return False

    def get_location(self) -> str:
        return str(self.url)

    def save_configuration(self, name: str, config: Union[str, bytes, _Element]) -> None:
        if isinstance(config, etree._Element):
            config = etree.tostring(config, encoding="utf-8", xml_declaration=True)
        response = self.client.put(self._config_path(name), config)
        if not response.ok:
            raise error.ConfigError(
                url=self._config_path(name),
                reason=error.errmsg(response),
            )

    def get_config(self, name: str) -> Optional[_Element]:
        """The parsed configuration document, or None if there is none"""
        response = self.client.get(
            self._config_path(name), headers={"Accept": "application/xml"}
        )
        if response.status != 200:
            log.debug("no configuration %s: %i", name, response.status)
            return None
        if not response.body:
            raise error.ConfigError(
                url=self._config_path(name), reason="no content in response from server"
            )
        try:
            return etree.fromstring(response.body)
        except etree.XMLSyntaxError as e:
            raise error.ConfigError(url=self._config_path(name), reason=str(e)) from e

    def get_configs(self) -> List[str]:
        """Names of the configurations in this store"""
        try:
            children = self.client.list_children(self.path)
        except error.MultistatusError as e:
            raise error.ConfigError(url=self.path, reason=str(e)) from e
        if children is None:
            raise error.ConfigError(url=self.path, reason="collection not found")

        names = []
        for child in children:
            if child.is_collection:
                continue
            child_path = URL.objectify(child.uri).path
            if not child_path.startswith(self.path):
                error.weirdness("member %s outside of %s" % (child.uri, self.path))
                continue
            child_name = child_path[len(self.path):]
            if not child_name.endswith(".xml"):
                continue
            names.append(child_name[: -len(".xml")])
        return names

    def get_store(self, name: str) -> "ConfigurationDavStore":
        """The store in sub-collection ``name``, created if missing"""
        new_path = self.path + name
        if not new_path.endswith("/"):
            new_path += "/"
        try:
            child = self.client.get_properties(new_path)
            if child is None:
                if self.client.mkcol(new_path) is None:
                    raise error.ConfigError(url=new_path, reason="unable to create store")
                child_url = new_path
            else:
                child_url = URL.objectify(child.uri).path
        except error.MultistatusError as e:
            raise error.ConfigError(url=new_path, reason=str(e)) from e
        return ConfigurationDavStore(str(self.url.join(child_url)), client=self.client)

    def _config_path(self, name: str) -> str:
        return self.path + name + ".xml"
