"""
Reading of connection configuration files.

A configuration file is json (or yaml, if pyyaml is installed) holding
named sections.  A section may inherit the keys of another one::

    {
        "default": {"dav_url": "https://dav.example.com/", "dav_user": "me"},
        "backup": {"inherits": "default", "dav_url": "https://backup.example.com/"}
    }
"""
import json
import logging
import os

log = logging.getLogger(__name__)


def config_locations():
    home = os.environ.get("HOME", "/")
    cfgdir = os.path.join(home, ".config", "davutil")
    return [
        os.path.join(cfgdir, "davutil.conf"),
        os.path.join(cfgdir, "davutil.yaml"),
        os.path.join(cfgdir, "davutil.json"),
        "/etc/davutil/davutil.conf",
    ]


def config_section(config, section="default", _seen=None):
    """
    The keys of section, including those inherited.  A missing
    section gives an empty dict.
    """
    if section not in config:
        return {}
    if _seen is None:
        _seen = set()
    _seen.add(section)
    parent = config[section].get("inherits")
    if parent and parent not in _seen:
        ret = config_section(config, parent, _seen)
    else:
        ret = {}
    ret.update(config[section])
    return ret


def read_config(fn):
    """
    Parse the config file fn.  Without fn, the first config file found
    in the standard locations is used.

    Returns the configuration as a dict, empty (or None when no file
    was found in the standard locations) if there is nothing usable.
    """
    if not fn:
        for location in config_locations():
            cfg = read_config(location)
            if cfg:
                return cfg
        return None

    try:
        with open(fn, "rb") as config_file:
            data = config_file.read()
    except FileNotFoundError:
        log.info("config file %s not found", fn)
        return {}

    try:
        return json.loads(data)
    except ValueError:
        pass

    ## pyyaml is the optional "yaml" extra
    try:
        import yaml
    except ImportError:
        log.error("config file %s is not valid json, and pyyaml is not installed", fn)
        return {}
    try:
        return yaml.load(data, yaml.SafeLoader) or {}
    except yaml.YAMLError:
        log.error(
            "config file %s is neither valid json nor yaml.  It will be ignored",
            fn,
            exc_info=True,
        )
        return {}
