import os
import sys


def daemonize() -> int:
	"""Forks the process: the parent exits right away and the child returns
	its own pid, continuing in the background."""
	sys.stdout.flush()
	sys.stderr.flush()
	if os.fork():
		# The parent must not run any cleanup that belongs to the child,
		# like closing the inherited listening socket.
		os._exit(0)
	return os.getpid()


# EOF
