from __future__ import annotations

import importlib
from fractions import Fraction
from typing import List, Optional

from .types import (
    Atom, Builtin, Builtins, EvalError, Fn, Frame, Keyword, RecurSignal,
    SList, SSet, ShadowArithmeticError, ShadowRuntimeError, ShadowTypeError,
    ArityError, StdlibFn, Symbol, Value, Var, Vector,
)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("shadowrepl.stdlib")
    _STDLIB_INITIALIZED = True

def register_stdlib(name: str, *, arity: Optional[int] = None):
    def dec(fn: StdlibFn):
        Builtins.stdlib_functions[name] = Builtin(name=name, fn=fn, arity=arity)
        return fn

    return dec

def lookup_builtin(name: str) -> Optional[Builtin]:
    return Builtins.stdlib_functions.get(name)

def type_name(value: Value) -> str:
    match value:
        case None:
            return "nil"
        case bool():
            return "boolean"
        case int() | float() | Fraction():
            return "number"
        case str():
            return "string"
        case Symbol():
            return "symbol"
        case Keyword():
            return "keyword"
        case Vector():
            return "vector"
        case SList() | list() | tuple():
            return "list"
        case dict():
            return "map"
        case SSet() | frozenset():
            return "set"
        case Fn() | Builtin():
            return "function"
        case Atom():
            return "atom"
        case Var():
            return "var"
        case _:
            return type(value).__name__

def call_value(fn: Value, args: List[Value], frame: Frame) -> Value:
    """Apply any callable language value to already-evaluated arguments."""
    match fn:
        case Fn():
            return call_fn(fn, args)
        case Builtin():
            return call_builtin(fn, args, frame)
        case Keyword():
            _expect_lookup_arity(str(fn), args)
            coll = args[0]
            default = args[1] if len(args) > 1 else None
            return coll.get(fn, default) if isinstance(coll, dict) else default
        case dict():
            _expect_lookup_arity("map", args)
            return fn.get(args[0], args[1] if len(args) > 1 else None)
        case Vector():
            if len(args) != 1:
                raise ArityError(f"Vector lookup expects 1 argument; got {len(args)}")
            idx = args[0]
            if not isinstance(idx, int) or isinstance(idx, bool) or not 0 <= idx < len(fn):
                raise EvalError(f"Index out of bounds: {idx!r}")
            return fn[idx]
        case SSet() | frozenset():
            _expect_lookup_arity("set", args)
            return args[0] if args[0] in fn else None
        case _:
            raise ShadowTypeError(f"Cannot call {type_name(fn)} as a function")

def _expect_lookup_arity(label: str, args: List[Value]) -> None:
    if len(args) not in (1, 2):
        raise ArityError(f"{label} lookup expects 1 or 2 arguments; got {len(args)}")

def call_builtin(builtin: Builtin, args: List[Value], frame: Frame) -> Value:
    if builtin.arity is not None and len(args) != builtin.arity:
        raise ArityError(f"{builtin.name} expects {builtin.arity} argument(s); got {len(args)}")

    try:
        return builtin.fn(frame, args)
    except ShadowRuntimeError:
        raise
    except ZeroDivisionError as exc:
        raise ShadowArithmeticError("Divide by zero") from exc
    except (TypeError, ValueError, IndexError, KeyError) as exc:
        raise EvalError(f"{builtin.name}: {exc}") from exc

def call_fn(fn: Fn, args: List[Value]) -> Value:
    """
    Closure call semantics:
    - parameters bind left to right; `& rest` collects the remainder as a list
      (nil when empty)
    - the fn's own name is visible inside its body for self recursion
    - `recur` in the body rebinds the parameters and loops without growing
      the Python stack
    """
    from .evaluator import eval_body  # local import to avoid cycle
    from .eval.destructure import bind_params

    while True:
        callee_frame = Frame(parent=fn.frame)

        if fn.name:
            callee_frame.define(fn.name, fn)

        bind_params(fn.params, args, callee_frame, label=fn.name or "fn")

        try:
            return eval_body(fn.body, callee_frame)
        except RecurSignal as signal:
            args = signal.args_list
        except RecursionError as exc:
            raise EvalError("Stack overflow") from exc

def ensure_seq(value: Value, label: str) -> List[Value]:
    """Coerce a seqable value into a Python list."""
    match value:
        case None:
            return []
        case str():
            return list(value)
        case dict():
            return [Vector([k, v]) for k, v in value.items()]
        case SList() | Vector() | list() | tuple() | SSet() | frozenset() | set():
            return list(value)
        case _:
            raise ShadowTypeError(f"{label}: don't know how to create a seq from {type_name(value)}")

