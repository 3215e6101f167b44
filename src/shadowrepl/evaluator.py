from __future__ import annotations

from typing import Any, Callable, Dict, Iterable

from .runtime import call_value, init_stdlib
from .types import (
    EvalError,
    Frame,
    Map,
    RecurSignal,
    SList,
    SSet,
    ShadowRuntimeError,
    Symbol,
    UnboundSymbolError,
    Value,
    Vector,
)

from .eval.common import form_position
from .eval.control import (
    eval_and,
    eval_cond,
    eval_do,
    eval_doseq,
    eval_dotimes,
    eval_for,
    eval_if,
    eval_or,
    eval_threading,
    eval_throw,
    eval_try,
    eval_when,
)
from .eval.fn import eval_def, eval_defn, eval_defonce, eval_fn, eval_var
from .eval.let import (
    eval_body as _eval_body,
    eval_if_let,
    eval_let,
    eval_loop,
    eval_recur,
    eval_when_let,
)

SpecialForm = Callable[[SList, Frame, Callable[[Value, Frame], Value]], Value]


def _eval_quote(form: SList, frame: Frame, eval_fn: Callable[[Value, Frame], Value]) -> Value:
    if len(form) != 2:
        raise EvalError("quote requires exactly one argument")
    return form[1]


SPECIAL_FORMS: Dict[str, SpecialForm] = {
    "quote": _eval_quote,
    "if": eval_if,
    "do": eval_do,
    "def": eval_def,
    "defonce": eval_defonce,
    "defn": eval_defn,
    "defn-": eval_defn,
    "fn": eval_fn,
    "fn*": eval_fn,
    "var": eval_var,
    "let": eval_let,
    "let*": eval_let,
    "loop": eval_loop,
    "recur": eval_recur,
    "when-let": eval_when_let,
    "if-let": eval_if_let,
    "when": eval_when,
    "when-not": eval_when,
    "cond": eval_cond,
    "and": eval_and,
    "or": eval_or,
    "throw": eval_throw,
    "try": eval_try,
    "->": eval_threading,
    "->>": eval_threading,
    "for": eval_for,
    "doseq": eval_doseq,
    "dotimes": eval_dotimes,
}


def is_special(name: str) -> bool:
    return name in SPECIAL_FORMS


def _maybe_attach_location(exc: ShadowRuntimeError, form: Any) -> None:
    if exc.meta is not None:
        return

    position = form_position(form)
    if position is not None:
        exc.meta = position

# ---------------- Core evaluator ----------------

def resolve_symbol(sym: Symbol, frame: Frame) -> Value:
    if sym.namespace is not None:
        root = frame.root()
        resolver = getattr(root, "resolve_qualified", None)
        if resolver is None:
            raise UnboundSymbolError(sym.name)
        return resolver(sym)

    return frame.get(sym.name)


def eval_form(form: Value, frame: Frame) -> Value:
    match form:
        case Symbol():
            return resolve_symbol(form, frame)
        case SList():
            return _eval_list(form, frame)
        case Vector():
            return Vector(eval_form(item, frame) for item in form)
        case dict():
            return Map((eval_form(k, frame), eval_form(v, frame)) for k, v in form.items())
        case SSet():
            return SSet(eval_form(item, frame) for item in form)
        case _:
            return form


def _eval_list(form: SList, frame: Frame) -> Value:
    if not form:
        return form

    head = form[0]

    try:
        if isinstance(head, Symbol) and head.name in SPECIAL_FORMS:
            return SPECIAL_FORMS[head.name](form, frame, eval_form)

        fn = eval_form(head, frame)
        args = [eval_form(arg, frame) for arg in form[1:]]
        return call_value(fn, args, frame)
    except ShadowRuntimeError as exc:
        _maybe_attach_location(exc, form)
        raise


def eval_body(forms: Iterable[Value], frame: Frame) -> Value:
    return _eval_body(forms, frame, eval_form)


def eval_forms(forms: Iterable[Value], frame: Frame) -> Value:
    init_stdlib()
    result: Value = None

    for form in forms:
        try:
            result = eval_form(form, frame)
        except RecurSignal:
            raise EvalError("Can only recur from tail position") from None

    return result
