from __future__ import annotations

from typing import Any, Callable, List, Optional

from ..types import EvalError, Frame, Keyword, SList, Symbol, Value

EvalFn = Callable[[Value, Frame], Value]

def expect_symbol(form: Any, context: str) -> Symbol:
    if isinstance(form, Symbol):
        return form

    raise EvalError(f"{context} must be a symbol")

def expect_min_forms(form: SList, count: int, label: str) -> None:
    if len(form) < count:
        raise EvalError(f"Too few arguments to {label}")

def head_name(form: Any) -> Optional[str]:
    """Name of the operator symbol of a call form, if any."""
    if isinstance(form, SList) and form and isinstance(form[0], Symbol):
        return form[0].name

    return None

def form_position(form: Any) -> Optional[dict]:
    meta = getattr(form, "meta", None)
    if not meta:
        return None

    line = meta.get(Keyword("line"))
    if line is None:
        return None

    return {"line": line, "column": meta.get(Keyword("column"))}

def quoted(form: Any) -> SList:
    return SList([Symbol("quote"), form])

def call(name: str, *args: Any) -> SList:
    return SList([Symbol(name), *args])

def split_docstring(forms: List[Any]) -> tuple[Optional[str], List[Any]]:
    if len(forms) > 1 and isinstance(forms[0], str):
        return forms[0], forms[1:]

    return None, forms
