import ipaddress
import os
from os import getenv
from typing import NamedTuple

# Defaults for the command line, each of them can be left unset in which
# case the matching option is required.
HOST: str | None = getenv("TOYSERVE_HOST")
PORT: str | None = getenv("TOYSERVE_PORT")
ROOT: str | None = getenv("TOYSERVE_ROOT")

LOG_LEVEL: str = getenv("TOYSERVE_LOG_LEVEL", "Info")
LOG_REQUESTS: bool = getenv("TOYSERVE_LOG_REQUESTS", "1") == "1"

# Unbounded unless set, a larger header block is answered with a 400.
MAX_HEADER: str | None = getenv("TOYSERVE_MAX_HEADER")


class ConfigurationError(ValueError):
	"""A missing or malformed configuration value, fatal at startup."""


class Endpoint(NamedTuple):
	"""Where to listen, and the directory that files are served from. The
	root always ends with a path separator."""

	host: str
	port: int
	root: str


def parseAddress(value: str | None) -> str:
	if not value:
		raise ConfigurationError("Missing bind address")
	try:
		return str(ipaddress.ip_address(value))
	except ValueError as e:
		raise ConfigurationError(f"Invalid ip address: {value!r}") from e


def parsePort(value: str | int | None) -> int:
	if value is None or value == "":
		raise ConfigurationError("Missing port")
	try:
		port = value if isinstance(value, int) else int(value, 10)
	except ValueError as e:
		raise ConfigurationError(f"Invalid port: {value!r}") from e
	if not (0 < port <= 65535):
		raise ConfigurationError(f"Invalid port: {value!r}")
	return port


def parseRoot(value: str | None) -> str:
	if not value:
		raise ConfigurationError("Missing root directory")
	return value + os.sep


def parseSize(value: str | int | None) -> int | None:
	if value is None or value == "":
		return None
	try:
		size = value if isinstance(value, int) else int(value, 10)
	except ValueError as e:
		raise ConfigurationError(f"Invalid size: {value!r}") from e
	if size <= 0:
		raise ConfigurationError(f"Invalid size: {value!r}")
	return size


def endpoint(
	host: str | None, port: str | int | None, root: str | None
) -> Endpoint:
	"""Validates the three values needed to start serving."""
	return Endpoint(parseAddress(host), parsePort(port), parseRoot(root))


# EOF
