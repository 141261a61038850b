from typing import NamedTuple

from ..utils.io import EOL
from .status import HTTP_STATUS

PROTOCOL: str = "HTTP/1.0"
CONTENT_TYPE: str = "text/html"

# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	"""Represents a request status line. Missing tokens are empty."""

	method: str
	path: str
	protocol: str


class HTTPResponse(NamedTuple):
	"""A response to be written back. Only responses with a body carry
	the `Content-Type` and `Content-Length` headers."""

	status: int
	body: bytes | None = None

	@property
	def message(self) -> str:
		return HTTP_STATUS[self.status]

	def head(self) -> bytes:
		lines: list[str] = [f"{PROTOCOL} {self.status} {self.message}"]
		if self.body is not None:
			lines.append(f"Content-Type: {CONTENT_TYPE}")
			lines.append(f"Content-Length: {len(self.body)}")
		return EOL.join(_.encode("ascii") for _ in lines) + EOL + EOL

	def encode(self) -> bytes:
		"""Head and body, as written to the socket in a single call."""
		head = self.head()
		return head + self.body if self.body else head

	@staticmethod
	def Ok(body: bytes) -> "HTTPResponse":
		return HTTPResponse(200, body)

	@staticmethod
	def Error(status: int) -> "HTTPResponse":
		if status not in HTTP_STATUS or status == 200:
			raise ValueError(f"Unsupported error status: {status}")
		return HTTPResponse(status)


# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""An error that is answered with the given status."""

	STATUS: int = 400

	def __init__(self, message: str, status: int | None = None):
		super().__init__(message)
		self.message: str = message
		self.status: int = self.STATUS if status is None else status


class ProtocolError(HTTPRequestError):
	"""Unsupported method or version, or a rejected path."""

	STATUS: int = 400


class NotFound(HTTPRequestError):
	"""The file is missing, unreadable or too large to be loaded."""

	STATUS: int = 404


# EOF
