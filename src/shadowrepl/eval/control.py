from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from ..runtime import ensure_seq
from ..types import (
    ArityError,
    EvalError,
    ExInfo,
    Frame,
    Keyword,
    RecurSignal,
    SList,
    ShadowArithmeticError,
    ShadowRuntimeError,
    ShadowTypeError,
    ThrownError,
    Value,
)
from .common import EvalFn, expect_min_forms, expect_symbol, head_name
from .destructure import bind_pattern
from .helpers import is_truthy
from .let import binding_pairs, eval_body

CATCH_CLASSES: Dict[str, Type[ShadowRuntimeError]] = {
    "Exception": ShadowRuntimeError,
    "Throwable": ShadowRuntimeError,
    "RuntimeException": ShadowRuntimeError,
    "Error": ShadowRuntimeError,
    "ExceptionInfo": ExInfo,
    "ArithmeticException": ShadowArithmeticError,
    "ClassCastException": ShadowTypeError,
    "ArityException": ArityError,
}

ELSE = Keyword("else")
DEFAULT = Keyword("default")


def eval_if(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    if len(form) not in (3, 4):
        raise EvalError(f"Too {'few' if len(form) < 3 else 'many'} arguments to if")

    if is_truthy(eval_fn(form[1], frame)):
        return eval_fn(form[2], frame)

    return eval_fn(form[3], frame) if len(form) == 4 else None


def eval_do(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    return eval_body(form[1:], frame, eval_fn)


def eval_when(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    expect_min_forms(form, 2, "when")
    test = is_truthy(eval_fn(form[1], frame))

    if head_name(form) == "when-not":
        test = not test

    return eval_body(form[2:], frame, eval_fn) if test else None


def eval_cond(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    clauses = form[1:]
    if len(clauses) % 2 != 0:
        raise EvalError("cond requires an even number of forms")

    for test, expr in zip(clauses[0::2], clauses[1::2]):
        if test == ELSE or is_truthy(eval_fn(test, frame)):
            return eval_fn(expr, frame)

    return None


def eval_and(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    result: Value = True

    for expr in form[1:]:
        result = eval_fn(expr, frame)
        if not is_truthy(result):
            return result

    return result


def eval_or(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    result: Value = None

    for expr in form[1:]:
        result = eval_fn(expr, frame)
        if is_truthy(result):
            return result

    return result


def coerce_throw_value(value: Value) -> ShadowRuntimeError:
    if isinstance(value, ShadowRuntimeError):
        return value

    return ThrownError(value)


def eval_throw(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    if len(form) != 2:
        raise EvalError("throw requires exactly one argument")

    raise coerce_throw_value(eval_fn(form[1], frame))


def _catch_class(spec: Any) -> Type[ShadowRuntimeError]:
    if spec == DEFAULT:
        return ShadowRuntimeError

    sym = expect_symbol(spec, "catch class")
    cls = CATCH_CLASSES.get(sym.name.rsplit(".", 1)[-1])

    if cls is None:
        raise EvalError(f"Unable to resolve classname: {sym.name}")

    return cls


def _eval_try_body(body: List[Any], frame: Frame, eval_fn: EvalFn) -> Value:
    try:
        return eval_body(body, frame, eval_fn)
    except RecurSignal:
        raise EvalError("Cannot recur across try") from None


def eval_try(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    body: List[Any] = []
    catches: List[SList] = []
    finally_forms: Optional[SList] = None

    for sub in form[1:]:
        match head_name(sub):
            case "catch":
                if finally_forms is not None:
                    raise EvalError("catch must precede finally in try")
                expect_min_forms(sub, 3, "catch")
                catches.append(sub)
            case "finally":
                finally_forms = sub
            case _:
                if catches or finally_forms is not None:
                    raise EvalError("Only catch or finally clause can follow catch in try expression")
                body.append(sub)

    try:
        return _eval_try_body(body, frame, eval_fn)
    except ShadowRuntimeError as exc:
        for clause in catches:
            if not isinstance(exc, _catch_class(clause[1])):
                continue

            scope = Frame(parent=frame)
            name = expect_symbol(clause[2], "catch binding").name
            scope.define(name, exc.value if isinstance(exc, ThrownError) else exc)
            return eval_body(clause[3:], scope, eval_fn)
        raise
    finally:
        if finally_forms is not None:
            eval_body(finally_forms[1:], frame, eval_fn)


def expand_threading(form: SList) -> Any:
    """Rewrite (-> x (f a) g) into (g (f x a)); ->> threads last."""
    expect_min_forms(form, 2, str(form[0]))
    thread_last = head_name(form) == "->>"
    acc = form[1]

    for step in form[2:]:
        if isinstance(step, SList) and step:
            args = list(step[1:])
            args = args + [acc] if thread_last else [acc] + args
            acc = SList([step[0], *args])
        else:
            acc = SList([step, acc])

    return acc


def eval_threading(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    return eval_fn(expand_threading(form), frame)


def _comprehension(bindings: Any, frame: Frame, eval_fn: EvalFn, label: str):
    """Yield one scope per combination of a for/doseq binding vector."""
    pairs = binding_pairs(bindings, label)

    def walk(idx: int, scope: Frame):
        if idx == len(pairs):
            yield scope
            return

        pattern, expr = pairs[idx]

        match pattern:
            case Keyword(name="let"):
                inner = Frame(parent=scope)
                for sub_pattern, sub_expr in binding_pairs(expr, ":let"):
                    bind_pattern(sub_pattern, eval_fn(sub_expr, inner), inner, eval_fn)
                yield from walk(idx + 1, inner)
            case Keyword(name="when"):
                if is_truthy(eval_fn(expr, scope)):
                    yield from walk(idx + 1, scope)
            case Keyword(name="while"):
                if not is_truthy(eval_fn(expr, scope)):
                    raise _StopComprehension(idx)
                yield from walk(idx + 1, scope)
            case Keyword():
                raise EvalError(f"Invalid '{label}' keyword {pattern!r}")
            case _:
                for item in ensure_seq(eval_fn(expr, scope), label):
                    inner = Frame(parent=scope)
                    bind_pattern(pattern, item, inner, eval_fn)
                    try:
                        yield from walk(idx + 1, inner)
                    except _StopComprehension as stop:
                        if stop.level <= idx:
                            raise
                        break

    try:
        yield from walk(0, frame)
    except _StopComprehension:
        return


class _StopComprehension(Exception):
    def __init__(self, level: int):
        self.level = level


def eval_for(form: SList, frame: Frame, eval_fn: EvalFn) -> SList:
    if len(form) != 3:
        raise EvalError("for requires a binding vector and one body form")

    return SList(eval_fn(form[2], scope) for scope in _comprehension(form[1], frame, eval_fn, "for"))


def eval_doseq(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    expect_min_forms(form, 2, "doseq")

    for scope in _comprehension(form[1], frame, eval_fn, "doseq"):
        eval_body(form[2:], scope, eval_fn)

    return None


def eval_dotimes(form: SList, frame: Frame, eval_fn: EvalFn) -> Value:
    expect_min_forms(form, 2, "dotimes")
    pairs = binding_pairs(form[1], "dotimes")
    if len(pairs) != 1:
        raise EvalError("dotimes requires exactly 2 forms in binding vector")

    name = expect_symbol(pairs[0][0], "dotimes binding").name
    count = eval_fn(pairs[0][1], frame)

    for i in range(int(count)):
        scope = Frame(parent=frame)
        scope.define(name, i)
        eval_body(form[2:], scope, eval_fn)

    return None
