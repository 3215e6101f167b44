from __future__ import annotations

from typing import Any, List

from ..types import EvalError, Frame, RecurSignal, SList, Value, Vector
from .common import EvalFn, expect_min_forms
from .destructure import bind_pattern
from .helpers import is_truthy


def binding_pairs(bindings: Any, label: str) -> List[tuple[Any, Any]]:
    """Split a binding vector into (pattern, value-form) pairs."""
    if not isinstance(bindings, Vector):
        raise EvalError(f"{label} requires a vector for its binding")

    if len(bindings) % 2 != 0:
        raise EvalError(f"{label} requires an even number of forms in binding vector")

    return list(zip(bindings[0::2], bindings[1::2]))


def eval_body(forms: Any, frame: Frame, eval_fn: EvalFn) -> Value:
    result: Value = None

    for form in forms:
        result = eval_fn(form, frame)

    return result


def eval_let(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    expect_min_forms(form, 2, "let")
    pairs = binding_pairs(form[1], "let")
    scope = Frame(parent=frame)

    for pattern, value_form in pairs:
        bind_pattern(pattern, eval_fn(value_form, scope), scope, eval_fn)

    return eval_body(form[2:], scope, eval_fn)


def eval_loop(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    expect_min_forms(form, 2, "loop")
    pairs = binding_pairs(form[1], "loop")
    scope = Frame(parent=frame)
    values: List[Value] = []

    for pattern, value_form in pairs:
        value = eval_fn(value_form, scope)
        bind_pattern(pattern, value, scope, eval_fn)
        values.append(value)

    while True:
        try:
            return eval_body(form[2:], scope, eval_fn)
        except RecurSignal as signal:
            if len(signal.args_list) != len(pairs):
                raise EvalError(
                    f"Mismatched argument count to recur, expected: {len(pairs)} args, got: {len(signal.args_list)}"
                ) from None
            scope = Frame(parent=frame)
            for (pattern, _), value in zip(pairs, signal.args_list):
                bind_pattern(pattern, value, scope, eval_fn)


def eval_recur(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    args = [eval_fn(arg, frame) for arg in form[1:]]
    raise RecurSignal(args)


def eval_when_let(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    return _conditional_let(form, frame, eval_fn, "when-let", else_forms=None)


def eval_if_let(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    if len(form) not in (3, 4):
        raise EvalError("if-let requires a binding vector, a then form and an optional else form")
    else_forms = form[3:]
    return _conditional_let(SList(form[:3]), frame, eval_fn, "if-let", else_forms=else_forms)


def _conditional_let(form: SList, frame: Frame, eval_fn: EvalFn, label: str, else_forms: Any) -> Value:
    expect_min_forms(form, 2, label)
    pairs = binding_pairs(form[1], label)
    if len(pairs) != 1:
        raise EvalError(f"{label} requires exactly 2 forms in binding vector")

    pattern, value_form = pairs[0]
    value = eval_fn(value_form, frame)

    if not is_truthy(value):
        return eval_body(else_forms or (), frame, eval_fn)

    scope = Frame(parent=frame)
    bind_pattern(pattern, value, scope, eval_fn)
    return eval_body(form[2:], scope, eval_fn)
