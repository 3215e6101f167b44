from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .runtime import init_stdlib, lookup_builtin
from .types import EvalError, Frame, Map, Symbol, UnboundSymbolError, Value, Var
from .utils import default_namespace

logger = logging.getLogger(__name__)

_UNBOUND = object()


class ShadowStore:
    """Process-wide table of shadowed values, one dict per namespace."""

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[str, Value]] = {}

    def _table(self, ns: str) -> Dict[str, Value]:
        return self._tables.setdefault(ns, {})

    def put(self, ns: str, name: str, value: Value) -> None:
        logger.debug("shadow put %s/%s", ns, name)
        self._table(ns)[name] = value

    def get(self, ns: str, name: str) -> Value:
        table = self._tables.get(ns, {})
        if name not in table:
            raise UnboundSymbolError(name)
        return table[name]

    def contains(self, ns: str, name: str) -> bool:
        return name in self._tables.get(ns, {})

    def names(self, ns: str) -> List[str]:
        return list(self._tables.get(ns, {}))

    def snapshot(self, ns: str) -> Dict[str, Value]:
        return dict(self._tables.get(ns, {}))

    def clear(self, ns: str) -> int:
        """Drop every shadow of `ns`; returns how many were removed."""
        removed = len(self._tables.pop(ns, {}))
        logger.debug("shadow clear %s (%d removed)", ns, removed)
        return removed

    def namespaces(self) -> List[str]:
        return [ns for ns, table in self._tables.items() if table]


DEFAULT_STORE = ShadowStore()


class NamespaceFrame(Frame):
    """
    Root frame of every evaluation. Symbols fall through, in order, to:
    - vars interned by def/defn
    - shadowed values of this namespace
    - builtins
    """

    def __init__(self, name: str, session: 'Session'):
        super().__init__(parent=None)
        self.name = name
        self.session = session
        self.var_metas: Dict[str, Map] = {}

    # ---- vars ----

    def define_var(self, name: str, value: Value, meta: Optional[dict] = None, bound: bool = True) -> Var:
        if bound:
            self.vars[name] = value
        elif name not in self.vars:
            self.vars[name] = _UNBOUND

        self.var_metas[name] = Map(meta or {})
        logger.debug("def %s/%s", self.name, name)
        return Var(self.name, name)

    def has_var(self, name: str) -> bool:
        return name in self.vars and self.vars[name] is not _UNBOUND

    def resolve_var(self, sym: Symbol) -> Var:
        ns = self.session.namespace(sym.namespace) if sym.namespace else self
        if sym.short not in ns.vars:
            raise EvalError(f"Unable to resolve var: {sym.name} in this context")
        return Var(ns.name, sym.short)

    def var_meta(self, var: Var) -> Optional[Map]:
        ns = self.session.namespace(var.ns)
        return ns.var_metas.get(var.name)

    def var_value(self, name: str) -> Value:
        value = self.vars[name]
        if value is _UNBOUND:
            raise EvalError(f"Var {self.name}/{name} is unbound.")
        return value

    def resolve_qualified(self, sym: Symbol) -> Value:
        if sym.namespace not in self.session.namespaces:
            raise UnboundSymbolError(sym.name)

        ns = self.session.namespace(sym.namespace)
        if sym.short not in ns.vars:
            raise UnboundSymbolError(sym.name)

        return ns.var_value(sym.short)

    # ---- shadows ----

    def shadow_put(self, name: str, value: Value) -> None:
        self.session.store.put(self.name, name, value)

    def shadow_get(self, name: str) -> Value:
        return self.session.store.get(self.name, name)

    def shadow_snapshot(self) -> Dict[str, Value]:
        return self.session.store.snapshot(self.name)

    def shadow_clear(self) -> int:
        return self.session.store.clear(self.name)

    # ---- lookup ----

    def get(self, name: str) -> Value:
        if name in self.vars:
            return self.var_value(name)

        store = self.session.store
        if store.contains(self.name, name):
            return store.get(self.name, name)

        builtin = lookup_builtin(name)
        if builtin is not None:
            return builtin

        raise UnboundSymbolError(name)

    def has(self, name: str) -> bool:
        return (
            name in self.vars
            or self.session.store.contains(self.name, name)
            or lookup_builtin(name) is not None
        )


class Session:
    """A set of namespaces sharing one shadow store."""

    def __init__(self, store: Optional[ShadowStore] = None):
        init_stdlib()
        self.store = store if store is not None else DEFAULT_STORE
        self.namespaces: Dict[str, NamespaceFrame] = {}

    def namespace(self, name: Optional[str] = None) -> NamespaceFrame:
        name = name or default_namespace()
        ns = self.namespaces.get(name)

        if ns is None:
            ns = NamespaceFrame(name, self)
            self.namespaces[name] = ns

        return ns

    def eval_string(self, source: str, ns: Optional[str] = None) -> Value:
        from .evaluator import eval_forms  # local import to avoid cycle
        from .lower import read_all

        return eval_forms(read_all(source), self.namespace(ns))

    def reset(self) -> None:
        """Forget every namespace; shadows live in the store and survive."""
        self.namespaces.clear()
