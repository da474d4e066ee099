# services/audit.py
from __future__ import annotations

import inspect
import logging
from dataclasses import asdict, is_dataclass
from enum import Enum
from functools import wraps
from typing import Any, Iterable, Mapping, Sequence

from pydantic import BaseModel

from contest_hub.config import Settings
from contest_hub.utils.sentinels import Missing

logger = logging.getLogger("contest_hub.audit")

# Never echoed into the log.
_SECRET_FIELDS = frozenset({"contestkeys", "contestunlockkey"})


def serialize(value: Any) -> Any:
	"""Turn DTOs, sequences and mappings into log-friendly plain values."""
	if value is None or isinstance(value, (bool, int, float, str)):
		return value
	if isinstance(value, Missing):
		return repr(value)
	if isinstance(value, Enum):
		return value.value
	if is_dataclass(value) and not isinstance(value, type):
		return serialize(asdict(value))
	if isinstance(value, Mapping):
		return {
			str(k): ("***" if k in _SECRET_FIELDS and isinstance(v, str) and v else serialize(v))
			for k, v in value.items()
		}
	if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
		return [serialize(v) for v in value]
	if isinstance(value, BaseModel):
		return serialize(dict(value))
	return str(value)


def summarize(result: Any) -> Any:
	"""Collections are logged by size only; they grow with the table."""
	if isinstance(result, Sequence) and not isinstance(result, (str, bytes, bytearray)):
		return f"<{len(result)} items>"
	return serialize(result)


def _wrap_async_callable(fn, action: str, *, skip_first_arg: bool):
	if getattr(fn, "__audit_wrapped__", False):
		return fn

	skip_count = 1 if skip_first_arg else 0

	@wraps(fn)
	async def wrapper(*args, **kwargs):
		if not Settings().audit_calls:
			return await fn(*args, **kwargs)

		payload = {
			"args": [serialize(arg) for arg in args[skip_count:]],
			"kwargs": {k: serialize(v) for k, v in kwargs.items()},
		}
		try:
			result = await fn(*args, **kwargs)
		except Exception as exc:
			logger.info("AUDIT action=%s.error payload=%s error=%r", action, payload, exc)
			raise
		logger.info("AUDIT action=%s payload=%s result=%s", action, payload, summarize(result))
		return result

	wrapper.__audit_wrapped__ = True  # type: ignore[attr-defined]
	return wrapper


def instrument_service_class(
	cls,
	*,
	prefix: str | None = None,
	exclude: Iterable[str] | None = None,
) -> None:
	"""Wrap public async methods of a service class so each call is logged."""
	action_prefix = prefix or cls.__name__
	excluded = set(exclude or [])

	for name, attr in list(cls.__dict__.items()):
		if name.startswith("_") or name in excluded:
			continue
		if inspect.iscoroutinefunction(attr):
			setattr(cls, name, _wrap_async_callable(attr, f"{action_prefix}.{name}", skip_first_arg=True))
		elif isinstance(attr, staticmethod) and inspect.iscoroutinefunction(attr.__func__):
			wrapped = _wrap_async_callable(attr.__func__, f"{action_prefix}.{name}", skip_first_arg=False)
			setattr(cls, name, staticmethod(wrapped))


__all__ = [
	"serialize",
	"summarize",
	"instrument_service_class",
]
