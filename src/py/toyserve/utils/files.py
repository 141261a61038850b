import os
import sys

# Sizes at or above this can't be held in memory, the file is treated as
# unavailable.
SIZE_OVERFLOW: int = sys.maxsize


def readFile(path: str) -> bytes | None:
	"""Reads the whole file at the given path, returning `None` when it
	can't be opened, sized or read."""
	try:
		with open(path, "rb") as f:
			size = f.seek(0, os.SEEK_END)
			if size >= SIZE_OVERFLOW:
				return None
			f.seek(0)
			return f.read(size)
	# NOTE: `ValueError` is raised for paths with embedded NUL bytes
	except (OSError, ValueError):
		return None


# EOF
