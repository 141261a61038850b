import os
import sys
import time
from contextvars import ContextVar
from enum import Enum
from typing import Any, Callable, NamedTuple, TypeAlias

from mypy_extensions import KwArg

ERR = sys.stderr

# SEE: https://no-color.org/
NO_COLOR: bool = "NO_COLOR" in os.environ
FORCE_COLOR: bool = "FORCE_COLOR" in os.environ
COLOR: bool = FORCE_COLOR or NO_COLOR is False

TPrimitive: TypeAlias = bool | int | float | str | bytes | None

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="toyserve")


class LogType(Enum):
	Message = 0  # A general information message
	Event = 20  # An event


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30  # A Warning
	Error = 40  # A managed error
	Exception = 50  # An un-managed error


LOG_LEVEL_COLOR = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}


class LogEntry(NamedTuple):
	origin: str
	time: float
	type: LogType = LogType.Message
	level: LogLevel = LogLevel.Info
	message: str | None = None
	name: str | None = None
	value: Any = None
	context: dict[str, TPrimitive] | None = None
	icon: str | None = None


# A sink for warnings, like `warning` below.
TReporter: TypeAlias = Callable[[str, KwArg(TPrimitive)], Any]


class Term:
	BOLD: str = "\033[1m" if COLOR else ""
	RESET: str = "\033[0m" if COLOR else ""

	@staticmethod
	def Color(color: int) -> str:
		return f"\033[0;38;5;{color}m" if COLOR else ""


class Threshold:
	Level: LogLevel = LogLevel.Info


def setLevel(level: LogLevel | str) -> LogLevel:
	"""Sets the minimum level of the entries that get written out."""
	Threshold.Level = level if isinstance(level, LogLevel) else LogLevel[level]
	return Threshold.Level


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	if entry.level.value < Threshold.Level.value:
		return entry
	icon: str = f" {entry.icon}" if entry.icon else ""
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	if entry.type == LogType.Event:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}] {entry.name}{Term.RESET} {formatData(entry.value)} {formatData(entry.context)}{Term.RESET}\n"
		)
	else:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}]{Term.RESET}{icon} {entry.message} {formatData(entry.context)}{Term.RESET}\n"
		)
	ERR.flush()
	return entry


def entry(
	*,
	origin: str | None = None,
	type: LogType = LogType.Message,
	level: LogLevel = LogLevel.Info,
	message: str | None = None,
	name: str | None = None,
	value: Any = None,
	context: dict[str, TPrimitive],
	icon: str | None = None,
) -> LogEntry:
	return LogEntry(
		origin=origin or LogOrigin.get(),
		time=time.time(),
		type=type,
		level=level,
		message=message,
		name=name,
		value=value,
		context=context,
		icon=icon,
	)


def debug(
	message: str,
	*,
	origin: str | None = None,
	icon: str | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			level=LogLevel.Debug,
			origin=origin,
			context=context,
			icon=icon,
		)
	)


def info(
	message: str,
	*,
	origin: str | None = None,
	icon: str | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(entry(message=message, origin=origin, context=context, icon=icon))


def warning(
	message: str,
	*,
	origin: str | None = None,
	icon: str | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			level=LogLevel.Warning,
			origin=origin,
			context=context,
			icon=icon,
		)
	)


def error(
	message: str,
	code: int | str | None,
	*,
	origin: str | None = None,
	icon: str | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			value=code,
			level=LogLevel.Error,
			origin=origin,
			context=context,
			icon=icon,
		)
	)


def event(
	event: str,
	value: Any = None,
	*,
	origin: str | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			name=event,
			value=value,
			type=LogType.Event,
			origin=origin,
			context=context,
		)
	)


def exception(
	exception: BaseException,
	message: str | None = None,
) -> BaseException:
	try:
		stream = ERR
		stream.write(
			f"!!! EXCP {f'{message}: [{exception.__class__.__name__}] {exception}' if message else f'[{exception.__class__.__name__}] {exception}'}\n"
		)
		tb = exception.__traceback__
		while tb:
			code = tb.tb_frame.f_code
			stream.write(
				f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n",
			)
			tb = tb.tb_next
		stream.flush()
	except Exception:  # nosec: B110
		# Swallow all exceptions so that this function can be called from an exception
		# handler safely.
		pass
	# Return the exception so that this function can be called like:
	#   raise exception(e)
	return exception


LOG_FUNCTIONS: dict[Callable[..., Any], LogLevel] = {
	debug: LogLevel.Debug,
	info: LogLevel.Info,
	warning: LogLevel.Warning,
	error: LogLevel.Error,
	event: LogLevel.Info,
}


def logged(item: Any) -> bool:
	"""Takes one of the logging function, and tells if it is currently
	written out. This is used to guard against running the whole entry
	building when not necessary."""
	level: LogLevel = LOG_FUNCTIONS.get(item, LogLevel.Exception)
	return level.value >= Threshold.Level.value


# EOF
