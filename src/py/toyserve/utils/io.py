DEFAULT_ENCODING: str = "utf8"
EOL: bytes = b"\r\n"
EOH: bytes = b"\r\n\r\n"


class HeaderBuffer:
	"""Accumulates bytes read from a client until the end of the header
	block is found. Only the tail that may complete a delimiter split across
	two reads is searched again on each feed."""

	__slots__ = ["buffer", "offset", "end", "eoh", "eohsize"]

	def __init__(self, eoh: bytes = EOH) -> None:
		self.buffer: bytearray = bytearray()
		self.offset: int = 0
		self.end: int = -1
		self.eoh: bytes = eoh
		self.eohsize: int = len(eoh)

	def reset(self) -> "HeaderBuffer":
		self.buffer.clear()
		self.offset = 0
		self.end = -1
		return self

	@property
	def isComplete(self) -> bool:
		return self.end != -1

	@property
	def head(self) -> bytes:
		"""The header block, without its terminating delimiter."""
		return bytes(self.buffer if self.end == -1 else self.buffer[: self.end])

	def feed(self, chunk: bytes) -> bool:
		"""Appends the chunk, returning `True` once the delimiter has been
		seen. Bytes fed after that are kept but never inspected."""
		self.buffer += chunk
		if self.end == -1:
			end = self.buffer.find(self.eoh, self.offset)
			if end == -1:
				self.offset = max(0, len(self.buffer) - self.eohsize + 1)
			else:
				self.end = end
		return self.end != -1

	def __len__(self) -> int:
		return len(self.buffer)


# EOF
