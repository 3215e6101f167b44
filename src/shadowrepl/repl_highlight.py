"""prompt_toolkit lexer for live syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .evaluator import is_special
from .lexer_rd import Lexer as ReaderLexer, LexError
from .runtime import init_stdlib, lookup_builtin
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "special": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "keyword": "ansiyellow",
    "identifier": "",
    "function": "bold ansiyellow",
    "macro": "bold ansimagenta",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

# Token type → highlight group.
_TT_GROUP = {
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NIL: "constant",
    TT.NUMBER: "number",
    TT.RATIO: "number",
    TT.STRING: "string",
    TT.KEYWORD: "keyword",
    TT.SYMBOL: "identifier",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LSQB: "punctuation",
    TT.RSQB: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.HASH_LBRACE: "punctuation",
    TT.QUOTE: "macro",
    TT.DEREF: "macro",
    TT.META: "macro",
    TT.DISCARD: "comment",
    TT.COMMENT: "comment",
}

_SEPARATORS = " \t,\f"


def _symbol_group(tok: Tok) -> str:
    if is_special(tok.value):
        return "special"
    if lookup_builtin(tok.value) is not None:
        return "function"
    return "identifier"


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = ReaderLexer(text, emit_comments=True).tokenize()
    except LexError:
        return [("", text)]

    tokens = [tok for tok in tokens if tok.type != TT.EOF]
    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        start = tok.column - 1
        end = tokens[i + 1].column - 1 if i + 1 < len(tokens) else len(text)

        # Trailing separators belong to the gap, not the token.
        while end > start and text[end - 1] in _SEPARATORS:
            end -= 1

        if start > pos:
            result.append(("", text[pos:start]))

        group = _symbol_group(tok) if tok.type == TT.SYMBOL else _TT_GROUP.get(tok.type, "")
        result.append((GROUP_STYLE.get(group, ""), text[start:end]))
        pos = end

    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class ShadowLexer(Lexer):
    """prompt_toolkit Lexer that highlights source using the reader's lexer."""

    def __init__(self) -> None:
        init_stdlib()

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
