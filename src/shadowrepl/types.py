from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from typing_extensions import TypeAlias

# ---------- Value Model ----------

@dataclass(frozen=True)
class Symbol:
    name: str

    @property
    def namespace(self) -> Optional[str]:
        if "/" in self.name and self.name != "/":
            return self.name.split("/", 1)[0]
        return None

    @property
    def short(self) -> str:
        if self.namespace is None:
            return self.name
        return self.name.split("/", 1)[1]

    def __repr__(self) -> str:
        return self.name

@dataclass(frozen=True)
class Keyword:
    name: str

    def __call__(self, coll: Any, default: Any = None) -> Any:
        if isinstance(coll, dict):
            return coll.get(self, default)
        return default

    def __repr__(self) -> str:
        return f":{self.name}"

class SList(tuple):
    """Sequence value, printed as ( ... ). Also the shape of every call form."""
    meta: Optional[Dict[Any, Any]] = None

    def with_meta(self, meta: Optional[Dict[Any, Any]]) -> 'SList':
        new = SList(self)
        new.meta = meta
        return new

    def __repr__(self) -> str:
        return "(" + " ".join(repr(x) for x in self) + ")"

class Vector(tuple):
    meta: Optional[Dict[Any, Any]] = None

    def with_meta(self, meta: Optional[Dict[Any, Any]]) -> 'Vector':
        new = Vector(self)
        new.meta = meta
        return new

    def __repr__(self) -> str:
        return "[" + " ".join(repr(x) for x in self) + "]"

class Map(dict):
    meta: Optional[Dict[Any, Any]] = None

    def __repr__(self) -> str:
        return "{" + ", ".join(f"{k!r} {v!r}" for k, v in self.items()) + "}"

class SSet(frozenset):
    def __repr__(self) -> str:
        return "#{" + " ".join(repr(x) for x in self) + "}"

@dataclass(eq=False)
class Fn:
    params: 'Vector'             # parameter patterns, may contain `&`
    body: Tuple[Any, ...]        # body forms, evaluated like `do`
    frame: 'Frame'               # closure frame
    name: Optional[str] = None

    def __repr__(self) -> str:
        return f"#function[{self.name or 'fn'}]"

StdlibFn = Callable[['Frame', List[Any]], Any]

@dataclass(frozen=True)
class Builtin:
    name: str
    fn: StdlibFn
    arity: Optional[int] = None

    def __repr__(self) -> str:
        return f"#function[{self.name}]"

@dataclass(frozen=True)
class Var:
    ns: str
    name: str

    def __repr__(self) -> str:
        return f"#'{self.ns}/{self.name}"

@dataclass(eq=False)
class Atom:
    value: Any
    watchers: List[Callable[[Any, Any], None]] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"#atom[{self.value!r}]"

Number: TypeAlias = Union[int, float, Fraction]

Value: TypeAlias = Any

# ---------- Environments ----------

class Frame:
    """Lexical scope; the root of every chain is a namespace frame."""

    def __init__(self, parent: Optional['Frame'] = None):
        self.parent = parent
        self.vars: Dict[str, Value] = {}

    def define(self, name: str, val: Value) -> None:
        self.vars[name] = val

    def get(self, name: str) -> Value:
        if name in self.vars:
            return self.vars[name]

        if self.parent is not None:
            return self.parent.get(name)

        raise UnboundSymbolError(name)

    def has(self, name: str) -> bool:
        if name in self.vars:
            return True
        return self.parent is not None and self.parent.has(name)

    def root(self) -> 'Frame':
        cur = self
        while cur.parent is not None:
            cur = cur.parent
        return cur

    def child(self) -> 'Frame':
        return Frame(parent=self)

# ---------- Exceptions (ShadowRuntimeError is canonical) ----------

class ShadowRuntimeError(Exception):
    meta: Optional[Dict[str, int]]

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.meta = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        msg = super().__str__()

        if not self.meta:
            return msg

        line = self.meta.get("line")
        col = self.meta.get("column")

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class EvalError(ShadowRuntimeError):
    pass

class UnboundSymbolError(ShadowRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Unable to resolve symbol: {name}")
        self.name = name

class ArityError(ShadowRuntimeError):
    pass

class ShadowTypeError(ShadowRuntimeError):
    pass

class ShadowArithmeticError(ShadowRuntimeError):
    pass

class ThrownError(ShadowRuntimeError):
    """Raised by `throw` with a value that is not already an error."""
    def __init__(self, value: Value):
        super().__init__(f"Thrown: {value!r}")
        self.value = value

class ExInfo(ShadowRuntimeError):
    def __init__(self, message: str, data: Optional[Map] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.data = data if data is not None else Map()
        self.cause = cause

class RecurSignal(Exception):
    """Internal control-flow exception used to implement `recur`."""
    def __init__(self, args: List[Value]):
        self.args_list = args

# ---------- Registries ----------

class Builtins:
    stdlib_functions: Dict[str, Builtin] = {}
