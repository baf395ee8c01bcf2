"""
Bounded conversion of arbitrary values into JSON-safe data.

Normalization runs before anything is stringified. It limits how deep
nested structures are followed and how many items of each container are
kept, and turns objects json cannot handle (exceptions, dates, models,
plain objects) into dicts and strings describing them.
"""

import collections.abc as _abc
import dataclasses as _dataclasses
import datetime as _datetime
import math as _math
import typing as _typing

import pydantic as _pydantic

import streamformatter.constants as _constants
import streamformatter.exceptions as exceptions


class Normalizer:
    """Recursive, depth- and size-limited value normalizer."""

    def __init__(
        self,
        max_depth: int = _constants.DEFAULT_MAX_NORMALIZE_DEPTH,
        max_item_count: int = _constants.DEFAULT_MAX_NORMALIZE_ITEM_COUNT,
        date_format: str = _constants.DEFAULT_DATE_FORMAT,
    ) -> None:
        self.max_depth = max_depth
        self.max_item_count = max_item_count
        self.date_format = date_format

    def normalize(self, value: _typing.Any, depth: int = 0) -> _typing.Any:
        """
        Normalize a value.

        Args:
            value: Anything.
            depth: Current nesting level; callers start at 0.

        Returns:
            None, a bool, int, str, list or dict, or a float that is finite.
        """
        if depth > self.max_depth:
            return f"Over {self.max_depth} levels deep, aborting normalization"

        if value is None or isinstance(value, (bool, int, str)):
            return value

        if isinstance(value, float):
            if _math.isnan(value):
                return "NaN"
            if _math.isinf(value):
                return "INF" if value > 0 else "-INF"
            return value

        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", errors="replace")

        if isinstance(value, (_datetime.datetime, _datetime.date)):
            return value.strftime(self.date_format)

        if isinstance(value, BaseException):
            return self.normalize_exception(value, depth)

        if isinstance(value, _abc.Mapping):
            return self._normalize_mapping(value, depth)

        if isinstance(value, (list, tuple, set, frozenset, _abc.Sequence)):
            return self._normalize_sequence(value, depth)

        return self._normalize_object(value, depth)

    def normalize_exception(self, exc: BaseException, depth: int = 0) -> dict[str, _typing.Any]:
        """Describe an exception and its wrapped causes as nested dicts."""
        file, line = exceptions.raise_location(exc)
        data: dict[str, _typing.Any] = {
            "class": exceptions.class_name(exc),
            "message": str(exc),
            "code": self.normalize(exceptions.exception_code(exc), depth + 1),
            "file": f"{file}:{line}" if file else "",
            "trace": exceptions.format_trace(exc),
        }

        chain = list(exceptions.iter_chain(exc))
        if len(chain) > 1:
            data["previous"] = self.normalize(chain[1], depth + 1)

        return data

    # =========================================================================
    # Containers
    # =========================================================================

    def _over_items(self, total: int) -> str:
        return f"Over {self.max_item_count} items ({total} total), aborting normalization"

    def _normalize_mapping(
        self, value: _abc.Mapping[_typing.Any, _typing.Any], depth: int
    ) -> dict[_typing.Any, _typing.Any]:
        result: dict[_typing.Any, _typing.Any] = {}
        for count, (key, item) in enumerate(value.items()):
            if count >= self.max_item_count:
                result["..."] = self._over_items(len(value))
                break
            result[key] = self.normalize(item, depth + 1)
        return result

    def _normalize_sequence(self, value: _typing.Iterable[_typing.Any], depth: int) -> list[_typing.Any]:
        items = list(value)
        result = [self.normalize(item, depth + 1) for item in items[: self.max_item_count]]
        if len(items) > self.max_item_count:
            result.append(self._over_items(len(items)))
        return result

    # =========================================================================
    # Objects
    # =========================================================================

    def _normalize_object(self, value: _typing.Any, depth: int) -> _typing.Any:
        name = type(value).__name__
        has_str = type(value).__str__ is not object.__str__

        try:
            if _dataclasses.is_dataclass(value) and not isinstance(value, type):
                return {name: self.normalize(_dataclasses.asdict(value), depth + 1)}
            if isinstance(value, _pydantic.BaseModel):
                return {name: self.normalize(value.model_dump(mode="json"), depth + 1)}
            if has_str:
                return {name: str(value)}
            if hasattr(value, "__dict__"):
                return {name: self.normalize(dict(vars(value)), depth + 1)}
        except Exception:
            return self._describe_unserializable(value, name, has_str)

        return f"[object] ({name})"

    @staticmethod
    def _describe_unserializable(value: _typing.Any, name: str, has_str: bool) -> _typing.Any:
        """Last resort for objects whose own conversion raised."""
        if has_str:
            try:
                return {name: str(value)}
            except Exception:
                pass
        return f"[object] ({name})"
