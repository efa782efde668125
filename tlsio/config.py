"""Server configuration.

A ``ServerConfig`` is loaded from a mapping or from environment variables
and turned into the matching driver by ``new_server``.
"""

import os

from collections import namedtuple

from tlsio.errors import ConfigError
from tlsio.server import SocketServer
from tlsio.tls import PROTOCOL_VERSIONS, TlsServer


_FIELDS = (
    "host", "port", "tls", "key_file", "cert_file", "timeout",
    "min_protocol", "max_protocol", "alpn_protocols",
)

_DEFAULTS = {
    "port": 8443,
    "tls": True,
    "key_file": None,
    "cert_file": None,
    "timeout": 30000,
    "min_protocol": None,
    "max_protocol": None,
    "alpn_protocols": (),
}

_TRUE_VALUES = frozenset(("1", "true", "yes", "on"))
_FALSE_VALUES = frozenset(("0", "false", "no", "off"))


def _to_int(name, value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError("{0} must be an integer, got {1!r}".format(name, value)) from None


def _to_bool(name, value):
    if isinstance(value, bool):
        return value

    lowered = str(value).strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False

    raise ConfigError("{0} must be a boolean, got {1!r}".format(name, value))


def _to_protocols(value):
    if isinstance(value, str):
        value = value.split(",")

    return tuple(protocol.strip() for protocol in value if protocol.strip())


class ServerConfig(namedtuple("ServerConfig", _FIELDS)):
    """Validated server settings, timeouts in milliseconds."""

    __slots__ = ()

    @classmethod
    def from_mapping(cls, mapping):
        unknown = set(mapping) - set(_FIELDS)
        if unknown:
            raise ConfigError("unknown settings: {0}".format(", ".join(sorted(unknown))))

        values = dict(_DEFAULTS)
        values.update(mapping)

        host = values.get("host")
        if not host or not isinstance(host, str):
            raise ConfigError("host must be a non-empty string")

        port = _to_int("port", values["port"])
        if not 0 <= port <= 65535:
            raise ConfigError("port must be between 0 and 65535, got {0}".format(port))

        timeout = _to_int("timeout", values["timeout"])
        if timeout < 0:
            raise ConfigError("timeout must not be negative, got {0}".format(timeout))

        tls = _to_bool("tls", values["tls"])
        if tls and not (values["key_file"] and values["cert_file"]):
            raise ConfigError("key_file and cert_file are required with tls")

        for name in ("min_protocol", "max_protocol"):
            if values[name] is not None and values[name] not in PROTOCOL_VERSIONS:
                raise ConfigError("unknown TLS protocol {0!r} for {1}".format(values[name], name))

        return cls(
            host=host,
            port=port,
            tls=tls,
            key_file=values["key_file"],
            cert_file=values["cert_file"],
            timeout=timeout,
            min_protocol=values["min_protocol"],
            max_protocol=values["max_protocol"],
            alpn_protocols=_to_protocols(values["alpn_protocols"] or ()),
        )

    @classmethod
    def from_environ(cls, environ=None, prefix="TLSIO_"):
        """Load settings from ``<prefix><FIELD>`` variables, for instance
        ``TLSIO_HOST`` or ``TLSIO_CERT_FILE``.
        """
        if environ is None:
            environ = os.environ

        mapping = {}
        for field in _FIELDS:
            key = prefix + field.upper()
            if key in environ:
                mapping[field] = environ[key]

        return cls.from_mapping(mapping)


def new_server(config, stats=None):
    """Create the server driver described by ``config``."""
    if not config.tls:
        return SocketServer(config.host, config.timeout)

    return TlsServer(
        config.host,
        config.key_file,
        config.cert_file,
        config.timeout,
        stats=stats,
        min_protocol=config.min_protocol,
        max_protocol=config.max_protocol,
        alpn_protocols=config.alpn_protocols,
    )
