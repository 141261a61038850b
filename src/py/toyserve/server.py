import asyncio
import errno
import ipaddress
import socket
import threading
from dataclasses import dataclass
from signal import SIGINT, SIGTERM
from typing import Any, Callable, NamedTuple

from .config import Endpoint
from .handler import READ_SIZE, ConnectionHandler
from .utils.limits import LimitType, unlimit
from .utils.logging import TReporter, event, exception, info, warning


@dataclass(slots=True)
class ServerState:
	isRunning: bool = True

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		e = context.get("exception")
		if e:
			exception(e)


class ServerOptions(NamedTuple):
	host: str = "127.0.0.1"
	port: int = 8000
	root: str = "./"
	backlog: int = 1_024
	# This is the polling timeout for accepting new connections, so that
	# the stop conditions are checked regularly.
	polling: float = 1.0
	readsize: int = READ_SIZE
	maxHeaderSize: int | None = None
	logRequests: bool = True
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True


OPTIONS: ServerOptions = ServerOptions()


class AIOSocketServer:
	"""Accepts connections on a non-blocking socket and runs a
	`ConnectionHandler` task for each of them, all on the same loop."""

	@staticmethod
	def Bind(host: str, port: int, backlog: int = OPTIONS.backlog) -> socket.socket:
		"""Creates the listening socket, raising `OSError` when the address
		can't be bound."""
		family = (
			socket.AF_INET6
			if ipaddress.ip_address(host).version == 6
			else socket.AF_INET
		)
		server = socket.socket(family, socket.SOCK_STREAM)
		try:
			server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
			server.bind((host, port))
			# The argument is the backlog of connections that will be accepted
			# before they are refused.
			server.listen(backlog)
		except OSError:
			server.close()
			raise
		# This is what we need to use it with asyncio
		server.setblocking(False)
		return server

	@classmethod
	async def OnConnection(
		cls,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
		report: TReporter = warning,
	) -> None:
		await ConnectionHandler(
			client,
			options.root,
			loop=loop,
			readsize=options.readsize,
			maxHeaderSize=options.maxHeaderSize,
			logRequests=options.logRequests,
			report=report,
		).run()

	@classmethod
	async def Serve(
		cls,
		options: ServerOptions = OPTIONS,
		*,
		server: socket.socket | None = None,
		report: TReporter = warning,
	) -> None:
		"""Main server coroutine, only returns once stopped by a signal or
		by the options' condition."""
		if server is None:
			server = cls.Bind(options.host, options.port, options.backlog)
		host, port = server.getsockname()[:2]

		tasks: set[asyncio.Task[None]] = set()
		loop = asyncio.get_running_loop()

		# Manage server state
		state = ServerState()
		# Signal handlers can only be set from the main thread.
		if (
			options.stopSignals
			and threading.current_thread() is threading.main_thread()
		):
			loop.add_signal_handler(SIGINT, lambda: state.stop())
			loop.add_signal_handler(SIGTERM, lambda: state.stop())
		loop.set_exception_handler(state.onException)

		info(
			"Server listening",
			icon="🚀",
			Host=host,
			Port=port,
			Root=options.root,
		)

		# A pending accept is kept across polling timeouts, it is only
		# cancelled once stopping.
		accepting: asyncio.Task[tuple[socket.socket, Any]] | None = None
		try:
			while state.isRunning:
				if options.condition and not options.condition():
					break
				if accepting is None:
					accepting = loop.create_task(loop.sock_accept(server))
				done, _ = await asyncio.wait(
					{accepting}, timeout=options.polling or 1.0
				)
				if not done:
					continue
				accepted, accepting = accepting, None
				try:
					client, _ = accepted.result()
				except OSError as e:
					report(
						"Can't accept client connection",
						Error=f"[{e.__class__.__name__}] {e}",
					)
					# [Errno 24] Too many open files
					if e.errno == errno.EMFILE:
						await asyncio.sleep(0.1)
					continue
				task = loop.create_task(
					cls.OnConnection(client, loop=loop, options=options, report=report)
				)
				tasks.add(task)
				task.add_done_callback(tasks.discard)
		finally:
			if accepting is not None:
				accepting.cancel()
				for res in await asyncio.gather(accepting, return_exceptions=True):
					# Accepted while stopping, it won't be served
					if isinstance(res, tuple):
						res[0].close()
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)


def run(
	endpoint: Endpoint,
	*,
	server: socket.socket | None = None,
	backlog: int = OPTIONS.backlog,
	polling: float = OPTIONS.polling,
	readsize: int = OPTIONS.readsize,
	maxHeaderSize: int | None = OPTIONS.maxHeaderSize,
	logRequests: bool = OPTIONS.logRequests,
	condition: Callable[[], bool] | None = None,
) -> None:
	"""High level function to run the server."""
	unlimit(LimitType.Files)
	options = ServerOptions(
		host=endpoint.host,
		port=endpoint.port,
		root=endpoint.root,
		backlog=backlog,
		polling=polling,
		readsize=readsize,
		maxHeaderSize=maxHeaderSize,
		logRequests=logRequests,
		condition=condition,
	)
	try:
		asyncio.run(AIOSocketServer.Serve(options, server=server))
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF
