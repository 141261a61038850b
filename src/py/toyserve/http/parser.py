from ..utils.io import DEFAULT_ENCODING, EOL
from .model import HTTPRequestLine, ProtocolError

METHOD: str = "GET"
PROTOCOL_PREFIX: str = "HTTP/1."
PARENT: str = ".."


def firstLine(head: bytes) -> str:
	"""Decodes the first line of a header block. Undecodable bytes are kept
	as surrogates so that the path maps back to the same file name."""
	end = head.find(EOL)
	return (head if end == -1 else head[:end]).decode(
		DEFAULT_ENCODING, "surrogateescape"
	)


def requestLine(line: str | bytes) -> HTTPRequestLine:
	"""Splits the line on ASCII whitespace only, like C's `isspace`. Other
	characters, like non-breaking spaces, are part of the tokens."""
	raw: bytes = (
		line
		if isinstance(line, bytes)
		else line.encode(DEFAULT_ENCODING, "surrogateescape")
	)
	tokens = [
		_.decode(DEFAULT_ENCODING, "surrogateescape") for _ in raw.split(None, 3)[:3]
	]
	tokens += [""] * (3 - len(tokens))
	return HTTPRequestLine(tokens[0], tokens[1], tokens[2])


def resolve(line: str | HTTPRequestLine) -> str:
	"""Returns the requested path, as-is, raising a `ProtocolError` when
	the method is not `GET` or the version is not HTTP/1.x."""
	req = requestLine(line) if isinstance(line, str) else line
	if req.method != METHOD:
		raise ProtocolError(f"Unsupported method: {req.method!r}")
	if not req.protocol.startswith(PROTOCOL_PREFIX):
		raise ProtocolError(f"Unsupported protocol: {req.protocol!r}")
	return req.path


def validate(path: str) -> str:
	"""Rejects empty paths and any path containing `..`. The path is not
	normalized, decoded or checked against symlinks."""
	if not path:
		raise ProtocolError("Empty path")
	if PARENT in path:
		raise ProtocolError(f"Parent reference in path: {path!r}")
	return path


# EOF
