"""
Configuration of a storage driver.

Connection parameters can come from keyword arguments, from environment
variables prepended with ``DAVSTORAGE_`` or from a json/yaml
configuration file.  A config file holds named sections; a section may
``inherits`` another one.  Keys meant for this library are prefixed with
``davstorage_``, so the same file can carry settings for other tools::

    {
        "default": {
            "davstorage_url": "https://cloud.example.com/remote.php/dav/files/alice",
            "davstorage_user": "alice",
            "davstorage_pass": "secret"
        },
        "backup": {
            "inherits": "default",
            "davstorage_default_folder": "/backup"
        }
    }
"""
import json
import logging
import os
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Dict
from typing import Optional
from typing import Union

from davstorage.protocol.types import Credentials


DEFAULT_CONNECTION_TIMEOUT = 30
DEFAULT_READ_TIMEOUT = 60

## aliases accepted in config files and environment variables
_key_aliases = {"user": "username", "pass": "password"}


def config_section(config, section="default"):
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def read_config(fn):
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config/"
        for config_file in (
            f"{cfgdir}/davstorage/storage.conf",
            f"{cfgdir}/davstorage/storage.yaml",
            f"{cfgdir}/davstorage/storage.json",
            f"{cfgdir}/storage.conf",
            "/etc/davstorage/storage.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## yaml is optional, and not included in the requirements
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.SafeLoader)
                except yaml.YAMLError:
                    logging.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                logging.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )

    except FileNotFoundError:
        logging.info("no config file found")
    except ValueError:
        logging.error("error in config file.  It will be ignored", exc_info=True)
    return {}


def section_params(section: Dict[str, Any], prefix: str = "davstorage_") -> Dict[str, Any]:
    """
    Picks the connection parameters out of a config section, dropping the
    prefix and resolving the user/pass aliases.
    """
    conn_params = {}
    for k in section:
        if k.startswith(prefix) and section[k] not in (None, ""):
            key = k[len(prefix) :]
            conn_params[_key_aliases.get(key, key)] = section[k]
    return conn_params


def environment_params() -> Dict[str, Any]:
    """``DAVSTORAGE_URL``, ``DAVSTORAGE_USERNAME`` and friends"""
    conf = {}
    for conf_key in (
        x
        for x in os.environ
        if x.startswith("DAVSTORAGE_") and not x.startswith("DAVSTORAGE_CONFIG")
    ):
        key = conf_key[len("DAVSTORAGE_") :].lower()
        conf[_key_aliases.get(key, key)] = os.environ[conf_key]
    return conf


def _timeout(value, default: int) -> float:
    """Unparsable, missing or non-positive timeouts fall back to the default"""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    if value <= 0:
        return default
    return value


def _flag(value, default: bool) -> Union[bool, str]:
    if value is None:
        return default
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("0", "false", "no", "off"):
            return False
        if lowered in ("1", "true", "yes", "on", ""):
            return True
        ## path to a CA bundle
        return value
    return bool(value)


@dataclass
class DriverConfig:
    """
    Everything needed to build a ``WebDAVStorageDriver``.

    Attributes:
        credentials: server url, username and password
        name: label of the storage, used in logs and diagnostics
        default_folder: folder used by the diagnostics
        connection_timeout: seconds to wait for a connection
        read_timeout: seconds to wait for a response
        ssl_verify_cert: passed to requests as ``verify``
        headers: extra headers sent with every request
        huge_tree: lift the lxml safety limits for very large listings
    """

    credentials: Credentials
    name: str = "webdav"
    default_folder: str = "/"
    connection_timeout: float = DEFAULT_CONNECTION_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    ssl_verify_cert: Union[bool, str] = True
    headers: Dict[str, str] = field(default_factory=dict)
    huge_tree: bool = False

    @property
    def timeout(self):
        """(connect, read) tuple as understood by requests"""
        return (self.connection_timeout, self.read_timeout)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DriverConfig":
        """
        Build a config from a flat dict, as found in a config file section
        or in the environment.  Unknown keys are ignored.

        Raises:
            ValueError: if no url is given
        """
        data = {_key_aliases.get(k, k): v for k, v in data.items()}
        url = data.get("url")
        if not url:
            raise ValueError("a WebDAV server url is required")
        return cls(
            credentials=Credentials(
                url=url,
                username=data.get("username"),
                password=data.get("password"),
            ),
            name=data.get("name") or "webdav",
            default_folder=data.get("default_folder") or "/",
            connection_timeout=_timeout(
                data.get("connection_timeout"), DEFAULT_CONNECTION_TIMEOUT
            ),
            read_timeout=_timeout(data.get("read_timeout"), DEFAULT_READ_TIMEOUT),
            ssl_verify_cert=_flag(data.get("ssl_verify_cert"), True),
            headers=dict(data.get("headers") or {}),
            huge_tree=bool(_flag(data.get("huge_tree"), False)),
        )

    def connection_info(self) -> Dict[str, Any]:
        """Description of the connection, without the password"""
        return {
            "name": self.name,
            "server_url": self.credentials.url,
            "username": self.credentials.username,
            "default_folder": self.default_folder,
            "connection_timeout": self.connection_timeout,
            "read_timeout": self.read_timeout,
        }


def resolve_params(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section_name: Optional[str] = None,
    environment: bool = True,
    **config_data,
) -> Optional[Dict[str, Any]]:
    """
    Finds connection parameters, in this order:

    * the keyword arguments given
    * environment variables prepended with ``DAVSTORAGE_``
    * a config file, given by name, by ``DAVSTORAGE_CONFIG_FILE`` or found
      in the usual places; the section is given by name, by
      ``DAVSTORAGE_CONFIG_SECTION`` or "default"

    Returns None when nothing was found.
    """
    if config_data:
        return config_data

    if environment:
        conf = environment_params()
        if conf:
            return conf
        if not config_file:
            config_file = os.environ.get("DAVSTORAGE_CONFIG_FILE")
        if not config_section_name:
            config_section_name = os.environ.get("DAVSTORAGE_CONFIG_SECTION")

    if check_config_file:
        cfg = read_config(config_file)
        if cfg:
            section = config_section(cfg, config_section_name or "default")
            conn_params = section_params(section)
            if conn_params:
                return conn_params
    return None
