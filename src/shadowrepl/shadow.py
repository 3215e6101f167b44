"""
Shadow evaluation.

An editor sends the text of a sub-expression plus the text of the binding
form around it. The expression is rewritten so that names bound earlier in
that form are read back from the namespace's shadow store, the result is
written back under the name it is bound to, and failures come back as an
`error: ...` string instead of an exception.

Rules, first match wins:
- no context: evaluate the expression as-is
- the expression is a `name value` pair: shadow every name of the pattern
- the expression is a def-like form: evaluate it with `:file`/`:line` meta
- otherwise: locate the expression in the context's binding vector and store
  its value under the paired name
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from .eval.common import call, head_name, quoted
from .eval.destructure import pattern_names
from .eval.fn import DEF_FORMS
from .evaluator import eval_form
from .lexer_rd import LexError
from .lower import read_all, read_string
from .parser_rd import ParseError
from .session import Session
from .types import Keyword, Map, SList, Symbol, Value, Vector

logger = logging.getLogger(__name__)

BINDING_FORMS = frozenset({"let", "let*", "loop", "when-let", "if-let", "for", "doseq"})
SEQ_BINDING_FORMS = frozenset({"for", "doseq"})

LET = Symbol("let")
TRY = Symbol("try")
CATCH = Symbol("catch")
EXCEPTION = Symbol("Exception")
ERR = Symbol("e")
ERROR_PREFIX = "error: "

Pair = Tuple[Any, Any]


@dataclass
class BindingContext:
    pairs: List[Pair]
    kind: str = "vector"


@dataclass
class Intent:
    """What a shadow evaluation will do; `rule` names the decision taken."""
    rule: str
    value: Any
    target: Any = None
    catch_up: List[Pair] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return pattern_names(self.target) if self.target is not None else []


def _is_pattern(form: Any) -> bool:
    return isinstance(form, (Symbol, Vector, dict))


def read_context(context_text: Optional[str]) -> Optional[Any]:
    """First form of the context text, or None when blank or unreadable."""
    if context_text is None or not context_text.strip():
        return None

    try:
        return read_string(context_text, eof_value=None)
    except (LexError, ParseError) as exc:
        logger.debug("ignoring unreadable context: %s", exc)
        return None


def binding_vector(context: Any) -> Optional[BindingContext]:
    """Binding pairs of a bare vector or of a let-like form."""
    if isinstance(context, Vector):
        kind, bindings = "vector", context
    elif head_name(context) in BINDING_FORMS and len(context) > 1 and isinstance(context[1], Vector):
        kind, bindings = head_name(context), context[1]
    else:
        return None

    items = list(bindings)
    pairs: List[Pair] = []

    for pattern, value in zip(items[0::2], items[1::2]):
        if pattern == Keyword("let") and isinstance(value, Vector):
            inner = list(value)
            pairs.extend(zip(inner[0::2], inner[1::2]))
        elif isinstance(pattern, Keyword):
            continue
        elif kind in SEQ_BINDING_FORMS:
            pairs.append((pattern, call("first", value)))
        else:
            pairs.append((pattern, value))

    return BindingContext(pairs=pairs, kind=kind)


def shadow_dest(pairs: Sequence[Pair], expr: Any, kind: str = "vector") -> Optional[int]:
    """Index of the pair `expr` belongs to: its value, or its name."""
    for idx, (pattern, value) in enumerate(pairs):
        if pattern == expr:
            return idx

        source = value[1] if kind in SEQ_BINDING_FORMS and head_name(value) == "first" else value
        if source == expr:
            return idx

    return None


def _catch_up(pairs: Sequence[Pair], upto: int, store_names: Sequence[str]) -> List[Pair]:
    """Earlier pairs to re-evaluate: any pair with a name not yet shadowed."""
    known = set(store_names)
    pending: List[Pair] = []

    for pattern, value in pairs[:upto]:
        names = pattern_names(pattern)
        if any(name not in known for name in names):
            pending.append((pattern, value))
            known.update(names)

    return pending


def guess_intent(exprs: Sequence[Any], context: Any, store_names: Sequence[str]) -> Intent:
    if context is None:
        return Intent(rule="as-is", value=_as_one(exprs))

    bindings = binding_vector(context)

    if len(exprs) == 2 and _is_pattern(exprs[0]):
        pattern, value = exprs
        catch_up: List[Pair] = []
        if bindings is not None:
            idx = shadow_dest(bindings.pairs, pattern, bindings.kind)
            if idx is not None:
                if bindings.kind in SEQ_BINDING_FORMS:
                    value = call("first", value)
                catch_up = _catch_up(bindings.pairs, idx, store_names)
        return Intent(rule="pair", value=value, target=pattern, catch_up=catch_up)

    expr = _as_one(exprs)

    if head_name(expr) in DEF_FORMS:
        return Intent(rule="def", value=expr)

    if bindings is not None:
        idx = shadow_dest(bindings.pairs, expr, bindings.kind)
        if idx is not None:
            pattern, value = bindings.pairs[idx]
            return Intent(
                rule="binding",
                value=value,
                target=pattern,
                catch_up=_catch_up(bindings.pairs, idx, store_names),
            )

    return Intent(rule="unbound", value=expr)


def _as_one(exprs: Sequence[Any]) -> Any:
    if len(exprs) == 1:
        return exprs[0]
    return call("do", *exprs)


def add_location_to_def(form: SList, file: Optional[str], line: Optional[int]) -> SList:
    meta = dict(form.meta or {})

    if file is not None:
        meta[Keyword("file")] = file
    if line is not None:
        meta[Keyword("line")] = line

    return form.with_meta(meta)


def _store_forms(pattern: Any) -> List[SList]:
    return [call("shadow-put!", quoted(Symbol(name)), Symbol(name)) for name in pattern_names(pattern)]


def _with_shadows(body: Any, store_names: Sequence[str]) -> SList:
    bindings: List[Any] = []
    for name in store_names:
        bindings.extend([Symbol(name), call("shadow-get", quoted(Symbol(name)))])
    return SList([LET, Vector(bindings), body])


def _guarded(body: Any) -> SList:
    handler = SList([CATCH, EXCEPTION, ERR, call("str", ERROR_PREFIX, ERR)])
    return SList([TRY, body, handler])


def _storing(intent: Intent) -> Any:
    """(let [catch-up... target value] (shadow-put! ...) ... {'name name})"""
    bindings: List[Any] = []
    puts: List[Any] = []

    for pattern, value in [*intent.catch_up, (intent.target, intent.value)]:
        bindings.extend([pattern, value])
        puts.extend(_store_forms(pattern))

    result = Map((quoted(Symbol(name)), Symbol(name)) for name in intent.names)
    return SList([LET, Vector(bindings), *puts, result])


def rewrite(
    expr_text: str,
    context_text: Optional[str] = None,
    file: Optional[str] = None,
    line: Optional[int] = None,
    *,
    store_names: Sequence[str] = (),
) -> Tuple[Intent, Any]:
    """Decide how to shadow-evaluate `expr_text` and build the form to evaluate."""
    exprs = read_all(expr_text)
    if not exprs:
        raise ParseError("EOF while reading")

    intent = guess_intent(exprs, read_context(context_text), store_names)
    logger.debug("shadow rule %s for %r", intent.rule, expr_text)

    match intent.rule:
        case "def":
            body = add_location_to_def(intent.value, file, line)
        case "as-is":
            body = intent.value
        case "pair" | "binding":
            body = _with_shadows(_storing(intent), store_names)
        case _:
            body = _with_shadows(intent.value, store_names)

    return intent, _guarded(body)


def reval(
    expr_text: str,
    context_text: Optional[str] = None,
    file: Optional[str] = None,
    line: Optional[int] = None,
    *,
    session: Optional[Session] = None,
    ns: Optional[str] = None,
) -> Value:
    """Shadow-evaluate `expr_text` inside `context_text` and return the result."""
    session = session if session is not None else Session()
    frame = session.namespace(ns)
    # Namespace vars, bound or declared, win over shadows of the same name.
    store_names = [name for name in session.store.names(frame.name) if name not in frame.vars]
    _, form = rewrite(expr_text, context_text, file, line, store_names=store_names)
    return eval_form(form, frame)


def shadow_clear(ns: Optional[str] = None, *, session: Optional[Session] = None) -> int:
    """Remove every shadow of the namespace; returns how many were dropped."""
    session = session if session is not None else Session()
    return session.namespace(ns).shadow_clear()
