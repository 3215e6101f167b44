from __future__ import annotations

from fractions import Fraction
from typing import Any, Dict, List, Optional

from .parser_rd import ParseError, parse_source
from .tree import Node, is_token, node_position, tree_children, tree_label
from .types import Keyword, Map, SList, SSet, Symbol, Vector

_ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    'b': '\b',
    'f': '\f',
    '"': '"',
    '\\': '\\',
    '0': '\0',
}

QUOTE = Symbol("quote")
DEREF = Symbol("deref")


def lower(ast: Node) -> List[Any]:
    """Lowering pass: syntax tree -> runtime data forms."""
    if tree_label(ast) == 'forms':
        return [lower_form(child) for child in tree_children(ast)]
    return [lower_form(ast)]


def lower_form(node: Node) -> Any:
    if is_token(node):
        return _lower_atom(node)

    label = tree_label(node)
    children = [lower_form(child) for child in tree_children(node)]
    line, column = node_position(node)

    match label:
        case 'list':
            form = SList(children)
            if line is not None:
                form.meta = {Keyword("line"): line, Keyword("column"): column}
            return form
        case 'vector':
            return Vector(children)
        case 'map':
            try:
                return Map(zip(children[0::2], children[1::2]))
            except TypeError:
                raise ParseError("Map keys must be hashable values") from None
        case 'set':
            return SSet(children)
        case 'quote':
            return SList([QUOTE, children[0]])
        case 'deref':
            return SList([DEREF, children[0]])
        case 'meta':
            meta_value, target = children
            return attach_meta(target, _normalize_meta(meta_value))
        case _:
            raise ParseError(f"Unknown syntax node '{label}'")


def attach_meta(form: Any, meta: Dict[Any, Any]) -> Any:
    if isinstance(form, (SList, Vector)):
        merged = dict(form.meta or {})
        merged.update(meta)
        return form.with_meta(merged)

    if isinstance(form, Map):
        new = Map(form)
        new.meta = {**(form.meta or {}), **meta}
        return new

    # Symbols and atoms carry no metadata; `^:private name` just reads as name.
    return form


def _normalize_meta(value: Any) -> Dict[Any, Any]:
    if isinstance(value, Keyword):
        return {value: True}
    if isinstance(value, Symbol):
        return {Keyword("tag"): value}
    if isinstance(value, dict):
        return dict(value)
    raise ParseError("Metadata must be a keyword, symbol or map")


def _lower_atom(tok: Any) -> Any:
    kind = str(tok.type)
    text = str(tok.value)

    match kind:
        case 'NUMBER':
            if any(ch in text for ch in '.eE'):
                return float(text)
            return int(text)
        case 'RATIO':
            ratio = Fraction(text)
            return int(ratio) if ratio.denominator == 1 else ratio
        case 'STRING':
            return unescape_string(text, tok)
        case 'KEYWORD':
            return Keyword(text)
        case 'SYMBOL':
            return Symbol(text)
        case 'NIL':
            return None
        case 'TRUE':
            return True
        case 'FALSE':
            return False
        case _:
            raise ParseError(f"Unknown token type '{kind}'")


def unescape_string(text: str, tok: Optional[Any] = None) -> str:
    body = text[1:-1]
    out: List[str] = []
    i = 0

    while i < len(body):
        ch = body[i]
        if ch != '\\':
            out.append(ch)
            i += 1
            continue

        nxt = body[i + 1] if i + 1 < len(body) else ''
        if nxt == 'u' and len(body) >= i + 6:
            out.append(chr(int(body[i + 2:i + 6], 16)))
            i += 6
            continue

        if nxt not in _ESCAPES:
            line = getattr(tok, 'line', None)
            raise ParseError(f"Unsupported escape character: \\{nxt}" + (f" at line {line}" if line else ""))

        out.append(_ESCAPES[nxt])
        i += 2

    return ''.join(out)


_EOF = object()


def read_all(source: str) -> List[Any]:
    """Read every form in source."""
    return lower(parse_source(source))


def read_string(source: str, eof_value: Any = _EOF) -> Any:
    """Read the first form in source.

    Empty input raises ParseError unless an eof_value is supplied.
    """
    forms = read_all(source)

    if not forms:
        if eof_value is _EOF:
            raise ParseError("EOF while reading")
        return eof_value

    return forms[0]
