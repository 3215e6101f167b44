"""
Recursive Descent Reader for shadowrepl

Structure:
- Lexer: Token stream from source
- Parser: Recursive descent over delimited collections and reader macros
- AST: `lark.Tree` nodes labelled by collection kind, `lark.Token` atoms

Tree labels:
- forms   : top-level sequence
- list    : ( ... )
- vector  : [ ... ]
- map     : { ... } (even number of children)
- set     : #{ ... }
- quote   : 'form
- deref   : @form
- meta    : ^meta form (children: meta, form)
"""

from typing import List, Optional

from lark import Token, Tree

from .lexer_rd import tokenize
from .token_types import TT, Tok
from .tree import Node, make_meta

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else None
        self.column = token.column if token else None
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )


_CLOSER_FOR = {
    TT.LPAR: (TT.RPAR, 'list', ')'),
    TT.LSQB: (TT.RSQB, 'vector', ']'),
    TT.LBRACE: (TT.RBRACE, 'map', '}'),
    TT.HASH_LBRACE: (TT.RBRACE, 'set', '}'),
}

_PREFIX_LABEL = {
    TT.QUOTE: 'quote',
    TT.DEREF: 'deref',
}

_ATOMS = {TT.NUMBER, TT.RATIO, TT.STRING, TT.SYMBOL, TT.KEYWORD, TT.NIL, TT.TRUE, TT.FALSE}


class Parser:
    """
    Recursive descent parser for reader forms.

    Every form is either an atom token or a delimited collection; reader
    macros (`'`, `@`, `^`, `#_`) prefix exactly one following form.
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = [t for t in tokens if t.type != TT.COMMENT]
        self.pos = 0
        self.current = self.tokens[0] if self.tokens else Tok(TT.EOF, None, 0, 0)

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current = self.tokens[self.pos]
        else:
            self.current = Tok(TT.EOF, None, prev.line, prev.column)
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse every top-level form"""
        forms: List[Node] = []

        while not self.check(TT.EOF):
            form = self.parse_form()
            if form is not None:
                forms.append(form)

        return Tree('forms', forms, make_meta(1, 1))

    def parse_form(self) -> Optional[Node]:
        """Parse one form; returns None for a discarded `#_` form"""
        tok = self.current

        if tok.type in _ATOMS:
            self.advance()
            return Token(tok.type.name, tok.value, line=tok.line, column=tok.column)

        if tok.type in _CLOSER_FOR:
            return self.parse_collection()

        if tok.type in _PREFIX_LABEL:
            self.advance()
            target = self.parse_required(tok, f"Expected a form after '{tok.value}'")
            return Tree(_PREFIX_LABEL[tok.type], [target], make_meta(tok.line, tok.column))

        if tok.type == TT.META:
            self.advance()
            meta_form = self.parse_required(tok, "Expected metadata after '^'")
            target = self.parse_required(tok, "Expected a form after metadata")
            return Tree('meta', [meta_form, target], make_meta(tok.line, tok.column))

        if tok.type == TT.DISCARD:
            self.advance()
            self.parse_required(tok, "Expected a form after '#_'")
            return None

        if tok.type == TT.EOF:
            raise ParseError("Unexpected end of input", tok)

        raise ParseError(f"Unmatched delimiter '{tok.value}'", tok)

    def parse_required(self, origin: Tok, message: str) -> Node:
        while True:
            if self.check(TT.EOF) or self.current.type in {TT.RPAR, TT.RSQB, TT.RBRACE}:
                raise ParseError(message, origin)
            form = self.parse_form()
            if form is not None:
                return form

    def parse_collection(self) -> Tree:
        """Parse ( ... ), [ ... ], { ... } or #{ ... }"""
        opener = self.advance()
        closer, label, closer_text = _CLOSER_FOR[opener.type]
        children: List[Node] = []

        while not self.check(closer):
            if self.check(TT.EOF):
                raise ParseError(f"Unbalanced '{opener.value}': expected '{closer_text}'", opener)
            if self.current.type in {TT.RPAR, TT.RSQB, TT.RBRACE}:
                raise ParseError(
                    f"Mismatched delimiter '{self.current.value}': expected '{closer_text}'",
                    self.current,
                )
            form = self.parse_form()
            if form is not None:
                children.append(form)

        self.advance()

        if label == 'map' and len(children) % 2 != 0:
            raise ParseError("Map literal must contain an even number of forms", opener)

        return Tree(label, children, make_meta(opener.line, opener.column))


def parse_source(source: str) -> Tree:
    """Tokenize and parse source into a `forms` tree"""
    return Parser(tokenize(source)).parse()
