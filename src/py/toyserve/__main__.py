import argparse
import sys

from . import config
from .config import ConfigurationError, endpoint, parseSize
from .server import OPTIONS, AIOSocketServer, run
from .utils.daemon import daemonize
from .utils.logging import LogLevel, error, info, setLevel


def parser() -> argparse.ArgumentParser:
	# `-h` is the bind address, help is only available as `--help`.
	p = argparse.ArgumentParser(
		prog="toyserve",
		description="Serves files from a directory, one request per connection",
		add_help=False,
	)
	p.add_argument("--help", action="help", help="Show this help message and exit")
	p.add_argument(
		"-h",
		"--host",
		default=config.HOST,
		required=config.HOST is None,
		help="IP address to bind to",
	)
	p.add_argument(
		"-p",
		"--port",
		default=config.PORT,
		required=config.PORT is None,
		help="Port to listen on (1-65535)",
	)
	p.add_argument(
		"-d",
		"--directory",
		default=config.ROOT,
		required=config.ROOT is None,
		help="Directory to serve files from",
	)
	p.add_argument(
		"--foreground",
		action="store_true",
		help="Do not detach into the background",
	)
	p.add_argument(
		"--log-level",
		default=config.LOG_LEVEL,
		choices=[_.name for _ in LogLevel],
		help="Minimum level of the log entries written to stderr",
	)
	p.add_argument(
		"--max-header",
		default=config.MAX_HEADER,
		help="Answers larger request headers with a 400 (unbounded by default)",
	)
	p.add_argument(
		"--no-log-requests",
		dest="logRequests",
		action="store_false",
		default=config.LOG_REQUESTS,
		help="Do not log each request",
	)
	return p


def main(args: list[str] | None = None) -> int:
	options = parser().parse_args(sys.argv[1:] if args is None else args)
	try:
		setLevel(options.log_level)
	except KeyError:
		error(f"Invalid log level: {options.log_level!r}", "CONFIG")
		return 1
	try:
		ep = endpoint(options.host, options.port, options.directory)
		maxHeaderSize = parseSize(options.max_header)
	except ConfigurationError as e:
		error(str(e), "CONFIG")
		return 1
	try:
		server = AIOSocketServer.Bind(ep.host, ep.port, OPTIONS.backlog)
	except OSError as e:
		error(f"Unable to bind to {ep.host}:{ep.port}: {e}", "HOSTPORTERR")
		return 1
	if not options.foreground:
		pid = daemonize()
		info("Detached into the background", Pid=pid)
	run(
		ep,
		server=server,
		maxHeaderSize=maxHeaderSize,
		logRequests=options.logRequests,
	)
	return 0


if __name__ == "__main__":
	sys.exit(main())

# EOF
