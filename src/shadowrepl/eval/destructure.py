"""Binding patterns shared by `let`, `loop`, `fn` parameters and shadowing.

A pattern is a symbol, a vector pattern (`[a b & more :as all]`) or a map
pattern (`{:keys [a b] :strs [c] :or {a 1} :as m}` plus explicit
`{name :key}` entries).
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..runtime import ensure_seq, type_name
from ..types import ArityError, EvalError, Frame, Keyword, SList, ShadowTypeError, Symbol, Value, Vector
from .common import EvalFn

AMP = Symbol("&")
AS = Keyword("as")
KEYS = Keyword("keys")
STRS = Keyword("strs")
SYMS = Keyword("syms")
OR = Keyword("or")


def bind_pattern(
    pattern: Any,
    value: Value,
    frame: Frame,
    eval_fn: EvalFn,
) -> None:
    match pattern:
        case Symbol():
            if pattern.namespace is not None:
                raise EvalError(f"Can't bind qualified name: {pattern.name}")
            frame.define(pattern.name, value)
        case Vector():
            _bind_vector(pattern, value, frame, eval_fn)
        case dict():
            _bind_map(pattern, value, frame, eval_fn)
        case _:
            raise EvalError(f"Unsupported binding form: {pattern!r}")


def _bind_vector(pattern: Vector, value: Value, frame: Frame, eval_fn: EvalFn) -> None:
    items = ensure_seq(value, "destructure")
    idx = 0
    pos = 0

    while pos < len(pattern):
        part = pattern[pos]

        if part == AMP:
            if pos + 1 >= len(pattern):
                raise EvalError("Missing binding after '&'")
            rest = items[idx:]
            bind_pattern(pattern[pos + 1], SList(rest) if rest else None, frame, eval_fn)
            pos += 2
            continue

        if part == AS:
            if pos + 1 >= len(pattern):
                raise EvalError("Missing binding after ':as'")
            bind_pattern(pattern[pos + 1], value, frame, eval_fn)
            pos += 2
            continue

        bind_pattern(part, items[idx] if idx < len(items) else None, frame, eval_fn)
        idx += 1
        pos += 1


def _bind_map(pattern: Dict[Any, Any], value: Value, frame: Frame, eval_fn: EvalFn) -> None:
    if value is None:
        value = {}
    elif isinstance(value, (SList, list)) and len(value) % 2 == 0:
        # `& {:keys [...]}` rest args arrive as a flat key/value list
        value = dict(zip(value[0::2], value[1::2]))

    if not isinstance(value, dict):
        raise ShadowTypeError(f"Cannot destructure {type_name(value)} as a map")

    defaults = pattern.get(OR) or {}

    def lookup(key: Any, name: Symbol) -> Value:
        if key in value:
            return value[key]
        if name in defaults:
            return eval_fn(defaults[name], frame)
        return None

    for key, target in pattern.items():
        if key in (KEYS, STRS, SYMS):
            for sym in target:
                if not isinstance(sym, Symbol):
                    raise EvalError(f"{key!r} expects a vector of symbols")
                lookup_key: Any = Keyword(sym.short) if key == KEYS else sym.short if key == STRS else sym
                frame.define(sym.short, lookup(lookup_key, Symbol(sym.short)))
        elif key in (OR, AS):
            continue
        else:
            # explicit entry: {local-pattern lookup-key}
            if isinstance(key, Symbol):
                bind_pattern(key, lookup(target, key), frame, eval_fn)
            else:
                bind_pattern(key, value.get(target), frame, eval_fn)

    if AS in pattern:
        bind_pattern(pattern[AS], value, frame, eval_fn)


def pattern_names(pattern: Any) -> List[str]:
    """Every local name a binding pattern introduces, in binding order."""
    names: List[str] = []

    def walk(part: Any) -> None:
        match part:
            case Symbol():
                if part != AMP and part.name != "_" and part.short not in names:
                    names.append(part.short)
            case Vector():
                for item in part:
                    if item not in (AMP, AS):
                        walk(item)
            case dict():
                for key, target in part.items():
                    if key in (KEYS, STRS, SYMS):
                        for sym in target:
                            walk(Symbol(sym.short) if isinstance(sym, Symbol) else sym)
                    elif key == AS:
                        walk(target)
                    elif key != OR:
                        walk(key)

    walk(pattern)
    return names


def split_params(params: Vector) -> tuple[List[Any], Optional[Any]]:
    fixed: List[Any] = []
    rest: Optional[Any] = None
    pos = 0

    while pos < len(params):
        part = params[pos]
        if part == AMP:
            if pos + 2 != len(params):
                raise EvalError("Exactly one binding must follow '&' in a parameter vector")
            rest = params[pos + 1]
            break
        fixed.append(part)
        pos += 1

    return fixed, rest


def bind_params(params: Vector, args: List[Value], frame: Frame, *, label: str) -> None:
    from ..evaluator import eval_form  # local import to avoid cycle

    fixed, rest = split_params(params)

    if len(args) < len(fixed) or (rest is None and len(args) > len(fixed)):
        raise ArityError(f"Wrong number of args ({len(args)}) passed to: {label}")

    for pattern, arg in zip(fixed, args):
        bind_pattern(pattern, arg, frame, eval_form)

    if rest is not None:
        extra = args[len(fixed):]
        bind_pattern(rest, SList(extra) if extra else None, frame, eval_form)
