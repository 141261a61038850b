import resource
from enum import Enum
from typing import NamedTuple


class LimitType(Enum):
	Files = resource.RLIMIT_NOFILE


# Darwin reports huge hard limits that lead to `OverflowError`s, so we
# never go above these.
REASONABLE_LIMITS: dict[LimitType, int] = {
	LimitType.Files: 100 * 1024,
}


class Limit(NamedTuple):
	type: LimitType
	soft: int
	hard: int


def limit(scope: LimitType) -> Limit:
	return Limit(scope, *resource.getrlimit(scope.value))


def unlimit(
	scope: LimitType = LimitType.Files, *, maximum: int | None = None
) -> int | bool:
	"""Raises the soft limit for the given scope to its hard limit, capped
	by `maximum` or the reasonable limit. Returns the new soft limit, or
	`False` when the system refused it."""
	lm = limit(scope)
	if lm.soft == resource.RLIM_INFINITY:
		return lm.soft
	cap: int = REASONABLE_LIMITS[scope] if maximum is None else maximum
	hard: int = cap if lm.hard == resource.RLIM_INFINITY else lm.hard
	target: int = max(lm.soft, min(cap, hard))
	if target == lm.soft:
		return target
	try:
		resource.setrlimit(scope.value, (target, lm.hard))
	except (ValueError, OSError):
		return False
	return target


# EOF
