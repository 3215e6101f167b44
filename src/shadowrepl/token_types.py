"""
Token Types for the shadowrepl reader

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - one per reader terminal"""

    # Atoms
    NUMBER = auto()
    RATIO = auto()
    STRING = auto()
    SYMBOL = auto()
    KEYWORD = auto()

    # Literal words
    NIL = auto()
    TRUE = auto()
    FALSE = auto()

    # Delimiters
    LPAR = auto()
    RPAR = auto()
    LSQB = auto()
    RSQB = auto()
    LBRACE = auto()
    RBRACE = auto()
    HASH_LBRACE = auto()  # #{

    # Reader macros
    QUOTE = auto()  # '
    DEREF = auto()  # @
    META = auto()  # ^
    DISCARD = auto()  # #_

    # Special
    COMMENT = auto()
    EOF = auto()


OPENERS = {TT.LPAR, TT.LSQB, TT.LBRACE, TT.HASH_LBRACE}
CLOSERS = {TT.RPAR, TT.RSQB, TT.RBRACE}


@dataclass
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
