"""
Exception chain expansion.

Walks an exception and the exceptions it wraps (explicit ``__cause__``,
or implicit ``__context__`` unless suppressed) and describes each one as
a group of table rows: the exception code, where it was raised, its
message, optionally its traceback, and its type.
"""

import builtins as _builtins
import collections.abc as _abc
import traceback as _traceback
import typing as _typing

import streamformatter.table.base as table_base

FIRST_LABEL = "Throwable"
PREVIOUS_LABEL = "previous Throwable"

Row = tuple[str, _typing.Any] | table_base.TableSeparator
"""A two-cell (label, value) row, or a section separator."""


def iter_chain(exc: BaseException) -> _abc.Iterator[BaseException]:
    """Yield the exception, then each wrapped cause, outermost first."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__


def class_name(exc: BaseException) -> str:
    """Builtin exceptions by bare name, everything else fully qualified."""
    cls = type(exc)
    if cls.__module__ == _builtins.__name__:
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def exception_code(exc: BaseException) -> _typing.Any:
    """The exception's code attribute, else its errno, else 0."""
    code = getattr(exc, "code", None)
    if code is None:
        code = getattr(exc, "errno", None)
    return 0 if code is None else code


def raise_location(exc: BaseException) -> tuple[str, int | None]:
    """File and line of the innermost traceback frame, if it was raised."""
    tb = exc.__traceback__
    if tb is None:
        return "", None
    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb.tb_frame.f_code.co_filename, tb.tb_lineno


def format_trace(exc: BaseException) -> str:
    """The traceback of a single exception, without its chained causes."""
    if exc.__traceback__ is None:
        return ""
    return "".join(_traceback.format_tb(exc.__traceback__)).rstrip("\n")


def format_inline(exc: BaseException) -> str:
    """One-line description used in message templates."""
    file, line = raise_location(exc)
    location = f"{file}:{line}" if file else "unknown location"
    return f"[object] ({class_name(exc)}(code: {exception_code(exc)}): {exc} at {location})"


def expand(
    exc: BaseException,
    *,
    include_stacktraces: bool = False,
) -> list[Row]:
    """
    Describe an exception chain as table rows.

    Each exception contributes a group of two-cell rows: a leading
    ("Throwable", code) row ("previous Throwable" for wrapped causes),
    then File, Line, Message, Trace (only with include_stacktraces) and
    Type. Groups are separated by a table separator.

    Values are left raw; the caller stringifies and truncates them.
    """
    rows: list[Row] = []
    for index, current in enumerate(iter_chain(exc)):
        if index:
            rows.append(table_base.SEPARATOR)

        file, line = raise_location(current)
        rows.append((FIRST_LABEL if index == 0 else PREVIOUS_LABEL, exception_code(current)))
        rows.append(("File", file))
        rows.append(("Line", "" if line is None else line))
        rows.append(("Message", str(current)))
        if include_stacktraces:
            rows.append(("Trace", format_trace(current)))
        rows.append(("Type", class_name(current)))

    return rows
