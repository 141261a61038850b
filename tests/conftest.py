import asyncio
import os
import socket
from pathlib import Path

import pytest

from toyserve.handler import ConnectionHandler
from toyserve.http.model import HTTPResponse


class Reports(list):
	"""Collects what is given to a handler's `report`."""

	def __call__(self, message: str, **context) -> None:
		self.append((message, context))

	@property
	def messages(self) -> list[str]:
		return [_[0] for _ in self]


@pytest.fixture
def root(tmp_path: Path) -> str:
	(tmp_path / "index.html").write_bytes(b"hi")
	(tmp_path / "empty.html").write_bytes(b"")
	(tmp_path / "sub").mkdir()
	(tmp_path / "sub" / "page.html").write_bytes(b"<p>sub</p>")
	return str(tmp_path) + os.sep


@pytest.fixture
def reports() -> Reports:
	return Reports()


def _handle(
	root: str,
	*chunks: bytes,
	closeAfter: bool = False,
	closeBefore: bool = False,
	**options,
) -> tuple[bytes, HTTPResponse | None]:
	"""Runs a handler on one end of a socket pair, the chunks being sent
	from the other end beforehand. Returns what the client received."""

	async def main() -> tuple[bytes, HTTPResponse | None]:
		server, client = socket.socketpair()
		server.setblocking(False)
		try:
			for chunk in chunks:
				client.sendall(chunk)
			if closeAfter:
				client.shutdown(socket.SHUT_WR)
			if closeBefore:
				client.close()
			res = await ConnectionHandler(
				server, root, loop=asyncio.get_running_loop(), **options
			).run()
			data = b""
			if not closeBefore:
				while chunk := client.recv(65_536):
					data += chunk
			return data, res
		finally:
			client.close()

	return asyncio.run(main())


@pytest.fixture
def handle():
	return _handle


# EOF
