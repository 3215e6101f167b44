"""shadowrepl: a small Lisp REPL with shadow evaluation of local bindings."""

from .session import Session, ShadowStore
from .shadow import reval, shadow_clear

__all__ = ["Session", "ShadowStore", "reval", "shadow_clear"]
