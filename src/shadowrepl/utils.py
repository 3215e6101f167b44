from __future__ import annotations

import os
from fractions import Fraction
from typing import Any

from .types import (
    Atom,
    Builtin,
    Fn,
    Keyword,
    SList,
    SSet,
    ShadowRuntimeError,
    Symbol,
    ThrownError,
    Var,
    Vector,
)

DEFAULT_NS = "user"


def debug_py_trace_enabled() -> bool:
    return os.environ.get("SHADOWREPL_DEBUG_PY_TRACE", "").lower() in ("1", "true", "yes", "on")


def default_namespace() -> str:
    return os.environ.get("SHADOWREPL_NS") or DEFAULT_NS


def log_level_name() -> str:
    return os.environ.get("SHADOWREPL_LOG_LEVEL", "WARNING").upper()


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Fraction)) and not isinstance(value, bool)


def is_sequential(value: Any) -> bool:
    return isinstance(value, (SList, Vector, list, tuple))


def lisp_equals(lhs: Any, rhs: Any) -> bool:
    match (lhs, rhs):
        case (bool(), bool()):
            return lhs is rhs
        case (bool(), _) | (_, bool()):
            return False
        case (None, None):
            return True
        case (None, _) | (_, None):
            return False
        case (Symbol(), Symbol()) | (Keyword(), Keyword()):
            return lhs == rhs
        case (str(), str()):
            return lhs == rhs
        case _ if is_number(lhs) and is_number(rhs):
            return lhs == rhs
        case _ if is_sequential(lhs) and is_sequential(rhs):
            return len(lhs) == len(rhs) and all(
                lisp_equals(a, b) for a, b in zip(lhs, rhs)
            )
        case (dict(), dict()):
            if len(lhs) != len(rhs):
                return False
            for key, val in lhs.items():
                if key not in rhs or not lisp_equals(val, rhs[key]):
                    return False
            return True
        case (SSet(), SSet()) | (frozenset(), frozenset()):
            return lhs == rhs
        case _:
            return lhs is rhs


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )


def _render_number(value: Any) -> str:
    if isinstance(value, Fraction):
        return f"{value.numerator}/{value.denominator}"

    if isinstance(value, float):
        if value != value:
            return "##NaN"
        if value in (float("inf"), float("-inf")):
            return "##Inf" if value > 0 else "##-Inf"

    return repr(value)


def pr_str(value: Any, readably: bool = True) -> str:
    """Render a value the way the REPL prints it."""
    if value is None:
        return "nil" if readably else ""

    if isinstance(value, bool):
        return "true" if value else "false"

    if is_number(value):
        return _render_number(value)

    if isinstance(value, str):
        return f'"{_escape(value)}"' if readably else value

    if isinstance(value, (Symbol, Keyword)):
        return repr(value)

    if isinstance(value, Vector):
        return "[" + " ".join(pr_str(x) for x in value) + "]"

    if isinstance(value, (SList, list, tuple)):
        return "(" + " ".join(pr_str(x) for x in value) + ")"

    if isinstance(value, dict):
        entries = [f"{pr_str(k)} {pr_str(v)}" for k, v in value.items()]
        return "{" + ", ".join(entries) + "}"

    if isinstance(value, (SSet, frozenset, set)):
        return "#{" + " ".join(pr_str(x) for x in value) + "}"

    if isinstance(value, Atom):
        return f"#atom[{pr_str(value.value)}]"

    if isinstance(value, ThrownError):
        return pr_str(value.value, readably)

    if isinstance(value, ShadowRuntimeError):
        return str(value)

    if isinstance(value, (Fn, Builtin, Var)):
        return repr(value)

    return str(value)


def to_str(value: Any) -> str:
    """Render a value for `str`/`println`: strings raw, nil empty."""
    return pr_str(value, readably=False)
