import resource

from toyserve.utils.files import readFile
from toyserve.utils.io import HeaderBuffer
from toyserve.utils.limits import LimitType, limit, unlimit


def test_delimiter_split_across_chunks():
	buffer = HeaderBuffer()
	chunks = [
		b"GET /time/5 HTTP/1.1\r\nHost: 127.0.0.1\r\nConnection: close",
		b"\r\n\r",
		b"\n",
	]
	found = [buffer.feed(_) for _ in chunks]
	assert found == [False, False, True]
	assert buffer.isComplete
	assert buffer.head == b"GET /time/5 HTTP/1.1\r\nHost: 127.0.0.1\r\nConnection: close"


def test_delimiter_one_byte_at_a_time():
	buffer = HeaderBuffer()
	data = b"GET / HTTP/1.0\r\n\r\nbody"
	found = [buffer.feed(data[i : i + 1]) for i in range(len(data))]
	assert found.index(True) == len(b"GET / HTTP/1.0\r\n\r\n") - 1
	assert buffer.head == b"GET / HTTP/1.0"
	assert len(buffer) == len(data)


def test_no_delimiter():
	buffer = HeaderBuffer()
	assert not buffer.feed(b"GET / HTTP/1.0\r\n")
	assert not buffer.feed(b"\r")
	assert not buffer.isComplete
	assert buffer.head == b"GET / HTTP/1.0\r\n\r"
	assert buffer.reset().head == b""


def test_read_file(tmp_path):
	path = tmp_path / "data.bin"
	path.write_bytes(b"\x00\x01binary")
	assert readFile(str(path)) == b"\x00\x01binary"
	assert readFile(str(tmp_path / "missing")) is None
	assert readFile(str(tmp_path)) is None
	assert readFile(str(tmp_path) + "/\x00") is None


def test_unlimit_never_lowers_the_limit():
	before = limit(LimitType.Files)
	raised = unlimit(LimitType.Files)
	after = limit(LimitType.Files)
	assert raised is False or raised == after.soft
	assert after.hard == before.hard
	assert before.soft == resource.RLIM_INFINITY or after.soft >= before.soft


# EOF
