import asyncio
import socket
from enum import Enum

from .http.model import HTTPRequestLine, HTTPRequestError, HTTPResponse, NotFound
from .http.parser import firstLine, requestLine, resolve, validate
from .utils.files import readFile
from .utils.io import HeaderBuffer
from .utils.logging import TReporter, debug, event, exception, logged, warning

READ_SIZE: int = 4_096
# Most bytes read and dropped after answering an oversized header.
DRAIN_LIMIT: int = 64 * 1_024


def load(path: str) -> bytes:
	"""Returns the contents of the file at `path`, raising `NotFound` when it
	can't be loaded."""
	contents = readFile(path)
	if contents is None:
		raise NotFound(f"Unable to load file: {path!r}")
	return contents


class HandlerState(Enum):
	"""The states a connection goes through, `Closed` being the only
	terminal one."""

	ReadingHeader = 0
	Parsing = 1
	ValidatingPath = 2
	LoadingFile = 3
	WritingResponse = 4
	Closed = 5


class ConnectionHandler:
	"""Owns one accepted client socket, reading a single request and writing
	back a single response before closing it. The handler suspends only
	while waiting for data to read or for the socket to accept the
	response."""

	__slots__ = [
		"client",
		"root",
		"loop",
		"readsize",
		"maxHeaderSize",
		"logRequests",
		"report",
		"state",
		"buffer",
		"request",
		"path",
		"contents",
		"response",
		"drain",
	]

	def __init__(
		self,
		client: socket.socket,
		root: str,
		*,
		loop: asyncio.AbstractEventLoop,
		readsize: int = READ_SIZE,
		maxHeaderSize: int | None = None,
		logRequests: bool = False,
		report: TReporter = warning,
	) -> None:
		self.client: socket.socket = client
		self.root: str = root
		self.loop: asyncio.AbstractEventLoop = loop
		self.readsize: int = readsize
		self.maxHeaderSize: int | None = maxHeaderSize
		self.logRequests: bool = logRequests
		self.report: TReporter = report
		self.state: HandlerState = HandlerState.ReadingHeader
		self.buffer: HeaderBuffer = HeaderBuffer()
		self.request: HTTPRequestLine | None = None
		self.path: str | None = None
		self.contents: bytes | None = None
		self.response: HTTPResponse | None = None
		# Set when unread request bytes may remain once the response is sent
		self.drain: bool = False

	@property
	def clientId(self) -> str:
		return f"{id(self.client):x}"

	async def run(self) -> HTTPResponse | None:
		"""Drives the connection until it is closed, returning the response
		that was written, if any."""
		try:
			while self.state is not HandlerState.Closed:
				self.state = await self.step()
		except Exception as e:
			exception(e, "Connection handler failed")
		finally:
			# Also reached on cancellation, the socket is always released.
			self.close()
		return self.response

	async def step(self) -> HandlerState:
		match self.state:
			case HandlerState.ReadingHeader:
				return await self.readHeader()
			case HandlerState.Parsing:
				return self.parse()
			case HandlerState.ValidatingPath:
				return self.validatePath()
			case HandlerState.LoadingFile:
				return self.loadFile()
			case HandlerState.WritingResponse:
				return await self.writeResponse()
			case _:
				return HandlerState.Closed

	# =========================================================================
	# STATES
	# =========================================================================

	async def readHeader(self) -> HandlerState:
		while True:
			try:
				chunk = await self.loop.sock_recv(self.client, self.readsize)
			except OSError as e:
				self.report(
					"Error reading request",
					Client=self.clientId,
					Error=f"[{e.__class__.__name__}] {e}",
				)
				return HandlerState.Closed
			if not chunk:
				self.report(
					"Client closed before sending a complete request",
					Client=self.clientId,
					Read=len(self.buffer),
				)
				return HandlerState.Closed
			logged(debug) and debug(
				"Reading Request", Client=self.clientId, Read=len(chunk)
			)
			if self.buffer.feed(chunk):
				return HandlerState.Parsing
			elif self.maxHeaderSize is not None and len(self.buffer) > self.maxHeaderSize:
				self.report(
					"Request header too large",
					Client=self.clientId,
					Read=len(self.buffer),
					Limit=self.maxHeaderSize,
				)
				self.drain = True
				return self.respond(HTTPResponse.Error(400))

	def parse(self) -> HandlerState:
		request = requestLine(firstLine(self.buffer.head))
		try:
			self.path = resolve(request)
		except HTTPRequestError as e:
			return self.fail(e)
		self.request = request
		return HandlerState.ValidatingPath

	def validatePath(self) -> HandlerState:
		try:
			validate(self.path or "")
		except HTTPRequestError as e:
			return self.fail(e)
		return HandlerState.LoadingFile

	def loadFile(self) -> HandlerState:
		# NOTE: This is a blocking read, other connections wait for it.
		try:
			self.contents = load(self.root + (self.path or ""))
		except HTTPRequestError as e:
			return self.fail(e)
		return self.respond(HTTPResponse.Ok(self.contents))

	async def writeResponse(self) -> HandlerState:
		response = self.response
		if response is None:
			return HandlerState.Closed
		try:
			await self.loop.sock_sendall(self.client, response.encode())
		except OSError as e:
			self.report(
				"Error writing response",
				Client=self.clientId,
				Status=response.status,
				Error=f"[{e.__class__.__name__}] {e}",
			)
		else:
			if self.drain:
				await self.discard()
		if self.logRequests:
			event(
				self.request.method if self.request else "-",
				self.request.path if self.request else None,
				Status=response.status,
			)
		return HandlerState.Closed

	# =========================================================================
	# HELPERS
	# =========================================================================

	def respond(self, response: HTTPResponse) -> HandlerState:
		self.response = response
		return HandlerState.WritingResponse

	def fail(self, error: HTTPRequestError) -> HandlerState:
		logged(debug) and debug(
			"Rejecting request",
			Client=self.clientId,
			Status=error.status,
			Reason=error.message,
		)
		return self.respond(HTTPResponse.Error(error.status))

	async def discard(self, limit: int = DRAIN_LIMIT) -> int:
		"""Signals the end of the response, then reads and drops what the
		client still sends, up to `limit` bytes or its end of stream.
		Closing with unread bytes would reset the connection and lose the
		response on the client side."""
		read: int = 0
		try:
			self.client.shutdown(socket.SHUT_WR)
			while read < limit:
				chunk = await self.loop.sock_recv(self.client, self.readsize)
				if not chunk:
					break
				read += len(chunk)
		except OSError:
			pass
		return read

	def close(self) -> None:
		self.state = HandlerState.Closed
		try:
			self.client.shutdown(socket.SHUT_RDWR)
		except OSError:
			pass
		try:
			self.client.close()
		except OSError:
			pass


# EOF
