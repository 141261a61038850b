import asyncio
import socket

from toyserve.server import AIOSocketServer, ServerOptions

OK_HI = b"HTTP/1.0 200 OK\r\nContent-Type: text/html\r\nContent-Length: 2\r\n\r\nhi"


async def fetch(port: int, request: bytes) -> bytes:
	reader, writer = await asyncio.open_connection("127.0.0.1", port)
	try:
		writer.write(request)
		await writer.drain()
		return await reader.read()
	finally:
		writer.close()


async def serving(root: str, main, **options):
	server = AIOSocketServer.Bind("127.0.0.1", 0)
	port = server.getsockname()[1]
	task = asyncio.create_task(
		AIOSocketServer.Serve(
			ServerOptions(
				**{
					"root": root,
					"polling": 0.05,
					"logRequests": False,
					"stopSignals": False,
					**options,
				}
			),
			server=server,
		)
	)
	try:
		return await main(port)
	finally:
		task.cancel()
		await asyncio.gather(task, return_exceptions=True)


def test_serves_sequential_connections(root):
	async def main(port: int) -> list[bytes]:
		return [
			await fetch(port, b"GET /index.html HTTP/1.1\r\n\r\n"),
			await fetch(port, b"GET /missing HTTP/1.1\r\n\r\n"),
			await fetch(port, b"DELETE /index.html HTTP/1.1\r\n\r\n"),
		]

	assert asyncio.run(serving(root, main)) == [
		OK_HI,
		b"HTTP/1.0 404 Not Found\r\n\r\n",
		b"HTTP/1.0 400 Bad Request\r\n\r\n",
	]


def test_stalled_client_does_not_block_others(root):
	async def main(port: int) -> tuple[list[bytes], bytes]:
		reader, writer = await asyncio.open_connection("127.0.0.1", port)
		writer.write(b"GET /index.html HTTP/1.0\r\n")
		await writer.drain()
		others = await asyncio.wait_for(
			asyncio.gather(
				*(fetch(port, b"GET /index.html HTTP/1.0\r\n\r\n") for _ in range(10))
			),
			timeout=5,
		)
		writer.write(b"\r\n")
		await writer.drain()
		stalled = await reader.read()
		writer.close()
		return others, stalled

	others, stalled = asyncio.run(serving(root, main))
	assert others == [OK_HI] * 10
	assert stalled == OK_HI


def test_condition_stops_serving(root):
	async def main() -> None:
		server = AIOSocketServer.Bind("127.0.0.1", 0)
		await AIOSocketServer.Serve(
			ServerOptions(root=root, stopSignals=False, condition=lambda: False),
			server=server,
		)
		assert server.fileno() == -1

	asyncio.run(main())


def test_accept_errors_do_not_stop_the_loop(root):
	reported: list[str] = []

	async def main() -> None:
		# Accepting on a socket that is not listening fails every time
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setblocking(False)
		await AIOSocketServer.Serve(
			ServerOptions(
				root=root, stopSignals=False, condition=lambda: len(reported) < 3
			),
			server=server,
			report=lambda message, **context: reported.append(message),
		)

	asyncio.run(main())
	assert reported == ["Can't accept client connection"] * 3


def test_short_polling_serves_every_connection(root):
	async def main(port: int) -> list[bytes]:
		responses: list[bytes] = []
		for _ in range(20):
			responses.append(await fetch(port, b"GET /index.html HTTP/1.0\r\n\r\n"))
			# Lets a few polling timeouts fire between connections
			await asyncio.sleep(0.003)
		return responses

	assert asyncio.run(serving(root, main, polling=0.001)) == [OK_HI] * 20


def test_oversized_header_gets_its_response(root):
	async def main(port: int) -> bytes:
		reader, writer = await asyncio.open_connection("127.0.0.1", port)
		try:
			writer.write(b"GET /" + b"a" * 256)
			await writer.drain()
			return await asyncio.wait_for(reader.read(), timeout=5)
		finally:
			writer.close()

	assert (
		asyncio.run(serving(root, main, maxHeaderSize=64, readsize=16))
		== b"HTTP/1.0 400 Bad Request\r\n\r\n"
	)


# EOF
