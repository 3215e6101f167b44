"""
Lexer for shadowrepl - Recursive Descent Reader

Tokenizes source text into a stream of tokens.

Features:
- Single-pass tokenization
- Commas are whitespace, `;` starts a comment
- Position tracking (line, column) at token start
- String literals kept verbatim (quotes and escapes) for the lowering pass
"""

from typing import List

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

SYMBOL_CHARS = frozenset("*+!-_'?<>=/.&%$|")


class LexError(Exception):
    """Lexical analysis error"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}, col {column}" if line else message)


class Lexer:
    """
    shadowrepl lexer.

    Produces atoms (numbers, strings, symbols, keywords) plus delimiter and
    reader-macro tokens. Whitespace and commas are dropped; comments are
    dropped unless `emit_comments` is set (the REPL highlighter wants them).
    """

    WORDS = {
        'nil': TT.NIL,
        'true': TT.TRUE,
        'false': TT.FALSE,
    }

    # Longest matches first
    PUNCTUATION = [
        ('#{', TT.HASH_LBRACE),
        ('#_', TT.DISCARD),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ("'", TT.QUOTE),
        ('@', TT.DEREF),
        ('^', TT.META),
    ]

    def __init__(self, source: str, emit_comments: bool = False):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []
        self.emit_comments = emit_comments

        # Start of the token being scanned
        self.tok_line = 1
        self.tok_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        if self.skip_whitespace():
            return

        self.mark()
        ch = self.peek()

        if ch == ';':
            self.scan_comment()
            return

        if ch == '"':
            self.scan_string()
            return

        if ch.isdigit() or (ch in '+-' and self.peek(1).isdigit()):
            self.scan_number()
            return

        if ch == ':':
            self.scan_keyword()
            return

        if ch == '\\':
            raise LexError("Character literals are not supported", self.line, self.column)

        if ch.isalpha() or (ch in SYMBOL_CHARS and ch != "'"):
            self.scan_symbol()
            return

        self.scan_punctuation()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_comment(self):
        """Scan `;` comment until end of line"""
        text = ''
        while self.peek() not in ('\n', '\r', '\0'):
            text += self.advance()

        if self.emit_comments:
            self.emit(TT.COMMENT, text)

    def scan_string(self):
        """Scan string literal: "..." (escapes kept as-is)"""
        start_line, start_col = self.tok_line, self.tok_column
        value = self.advance()  # Keep opening quote

        while self.pos < len(self.source) and self.peek() != '"':
            if self.peek() == '\\':
                value += self.advance()
                if self.pos < len(self.source):
                    value += self.advance()
            else:
                value += self.advance()

        if self.pos >= len(self.source):
            raise LexError("Unterminated string", start_line, start_col)

        value += self.advance()  # Closing quote
        self.emit(TT.STRING, value)

    def scan_number(self):
        """Scan number literal: 12, -3, 1.5, 2e10, 1/2"""
        value = ''

        if self.peek() in '+-':
            value += self.advance()

        while self.peek().isdigit():
            value += self.advance()

        # Ratio
        if self.peek() == '/' and self.peek(1).isdigit():
            value += self.advance()
            while self.peek().isdigit():
                value += self.advance()
            self.expect_delimiter(value)
            self.emit(TT.RATIO, value)
            return

        # Decimal part
        if self.peek() == '.' and self.peek(1).isdigit():
            value += self.advance()
            while self.peek().isdigit():
                value += self.advance()

        # Scientific notation
        if self.peek() in ('e', 'E'):
            value += self.advance()
            if self.peek() in ('+', '-'):
                value += self.advance()
            if not self.peek().isdigit():
                raise LexError(f"Invalid number '{value}'", self.tok_line, self.tok_column)
            while self.peek().isdigit():
                value += self.advance()

        self.expect_delimiter(value)
        # Keep as string; lowering decides int vs float
        self.emit(TT.NUMBER, value)

    def scan_keyword(self):
        """Scan keyword: :name or ::name (auto-resolved keywords read as plain ones)"""
        self.advance()
        if self.peek() == ':':
            self.advance()

        name = self.scan_name()
        if not name:
            raise LexError("Invalid keyword ':'", self.tok_line, self.tok_column)
        self.emit(TT.KEYWORD, name)

    def scan_symbol(self):
        """Scan symbol or literal word"""
        value = self.scan_name()
        token_type = self.WORDS.get(value, TT.SYMBOL)
        self.emit(token_type, value)

    def scan_name(self) -> str:
        value = ''
        while self.peek().isalnum() or self.peek() in SYMBOL_CHARS or self.peek() in ':#':
            value += self.advance()
        return value

    def scan_punctuation(self):
        """Scan delimiters and reader macros"""
        for op_str, op_type in self.PUNCTUATION:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)
                return

        ch = self.peek()
        raise LexError(f"Unexpected character '{ch}'", self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def expect_delimiter(self, value: str):
        nxt = self.peek()
        if nxt.isalpha() or nxt in SYMBOL_CHARS:
            raise LexError(f"Invalid number '{value}{nxt}'", self.tok_line, self.tok_column)

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = ''
        for _ in range(n):
            ch = self.source[self.pos] if self.pos < len(self.source) else '\0'
            result += ch
            self.pos += 1
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return result

    def skip_whitespace(self) -> bool:
        """Skip whitespace and commas, return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t', '\n', '\r', ',', '\f'):
            self.advance()
            skipped = True
        return skipped

    def mark(self):
        self.tok_line = self.line
        self.tok_column = self.column

    def emit(self, token_type: TT, value):
        """Emit a token positioned at the start of its text"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.tok_line,
            column=self.tok_column
        )
        self.tokens.append(tok)


def tokenize(source: str, emit_comments: bool = False) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, emit_comments=emit_comments)
    return lexer.tokenize()
