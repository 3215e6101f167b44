from __future__ import annotations

from typing import Any, Dict, Optional

from ..types import EvalError, Fn, Frame, Keyword, SList, Symbol, Value, Var, Vector
from .common import EvalFn, expect_min_forms, expect_symbol, split_docstring
from .destructure import split_params

DEF_FORMS = frozenset({"def", "defn", "defn-", "defonce"})


def _namespace_frame(frame: Frame) -> Any:
    root = frame.root()
    if not hasattr(root, "define_var"):
        raise EvalError("def requires a namespace")
    return root


def _make_fn(name: Optional[str], params: Any, body: Any, frame: Frame) -> Fn:
    if isinstance(params, SList):
        raise EvalError("Multi-arity fn is not supported")

    if not isinstance(params, Vector):
        raise EvalError("Parameter declaration must be a vector")

    split_params(params)  # validates `&` placement up front
    return Fn(params=params, body=tuple(body), frame=frame, name=name)


def eval_fn(form: SList, frame: Frame, eval_fn: EvalFn) -> Fn:
    expect_min_forms(form, 2, "fn")
    rest = list(form[1:])
    name: Optional[str] = None

    if isinstance(rest[0], Symbol):
        name = rest.pop(0).name

    if not rest:
        raise EvalError("fn requires a parameter vector")

    return _make_fn(name, rest[0], rest[1:], frame)


def _var_meta(form: SList, name: str, doc: Optional[str]) -> Dict[Keyword, Value]:
    meta: Dict[Keyword, Value] = {Keyword("name"): Symbol(name)}
    meta.update(form.meta or {})

    if doc is not None:
        meta[Keyword("doc")] = doc

    return meta


def eval_def(form: SList, frame: Frame, eval_fn: EvalFn) -> Var:
    if len(form) not in (2, 3, 4):
        raise EvalError("Too many arguments to def")

    name = expect_symbol(form[1], "First argument to def").name
    ns = _namespace_frame(frame)
    doc: Optional[str] = None

    if len(form) == 2:
        return ns.define_var(name, None, _var_meta(form, name, doc), bound=False)

    value_form = form[-1]
    if len(form) == 4:
        if not isinstance(form[2], str):
            raise EvalError("def docstring must be a string")
        doc = form[2]

    return ns.define_var(name, eval_fn(value_form, frame), _var_meta(form, name, doc))


def eval_defonce(form: SList, frame: Frame, eval_fn: EvalFn) -> Optional[Var]:
    if len(form) != 3:
        raise EvalError("defonce requires a name and a value")

    name = expect_symbol(form[1], "First argument to defonce").name
    ns = _namespace_frame(frame)

    if ns.has_var(name):
        return None

    return ns.define_var(name, eval_fn(form[2], frame), _var_meta(form, name, None))


def eval_defn(form: SList, frame: Frame, eval_fn: EvalFn) -> Var:
    label = str(form[0])
    expect_min_forms(form, 3, label)
    name = expect_symbol(form[1], f"First argument to {label}").name
    doc, rest = split_docstring(list(form[2:]))

    # attr-map between docstring and params
    if rest and isinstance(rest[0], dict):
        rest = rest[1:]

    if not rest:
        raise EvalError(f"{label} requires a parameter vector")

    ns = _namespace_frame(frame)
    meta = _var_meta(form, name, doc)
    meta[Keyword("arglists")] = SList([rest[0]])

    if label == "defn-":
        meta[Keyword("private")] = True

    fn = _make_fn(name, rest[0], rest[1:], frame)
    return ns.define_var(name, fn, meta)


def eval_var(form: SList, frame: Frame, eval_fn: EvalFn) -> Var:
    if len(form) != 2:
        raise EvalError("var requires exactly one symbol")

    sym = expect_symbol(form[1], "Argument to var")
    return _namespace_frame(frame).resolve_var(sym)
