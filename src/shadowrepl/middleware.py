"""
REPL middleware for shadow evaluation.

Handlers take one message dict and return a list of response dicts, nREPL
style. `wrap_shadows` answers the shadow ops itself and passes every other
op through to the wrapped handler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .lexer_rd import LexError
from .parser_rd import ParseError
from .session import Session
from .shadow import reval, shadow_clear
from .utils import pr_str

logger = logging.getLogger(__name__)

Message = Dict[str, Any]
Handler = Callable[[Message], List[Message]]

SHADOW_OPS = ("shadow-eval", "shadow-clear", "shadow-list")


class RequestError(Exception):
    pass


@dataclass
class EvalRequest:
    code: str
    context: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None
    ns: Optional[str] = None

    @classmethod
    def from_message(cls, msg: Message) -> 'EvalRequest':
        code = msg.get("code")
        if not isinstance(code, str) or not code.strip():
            raise RequestError("shadow-eval requires non-empty 'code'")

        context = msg.get("context")
        if context is not None and not isinstance(context, str):
            raise RequestError("'context' must be a string")
        if context is not None and not context.strip():
            context = None

        line = msg.get("line")
        if line is not None:
            try:
                line = int(line)
            except (TypeError, ValueError):
                raise RequestError(f"'line' must be an integer; got {line!r}") from None

        return cls(code=code, context=context, file=msg.get("file"), line=line, ns=msg.get("ns"))


def _reply(msg: Message, **fields: Any) -> Message:
    response: Message = {key: msg[key] for key in ("id", "session") if key in msg}
    response.update(fields)
    return response


def _eval(msg: Message, session: Session) -> List[Message]:
    try:
        req = EvalRequest.from_message(msg)
    except RequestError as exc:
        return [_reply(msg, err=str(exc), status=["done", "error"])]

    ns = session.namespace(req.ns).name

    try:
        result = reval(req.code, req.context, req.file, req.line, session=session, ns=ns)
    except (LexError, ParseError) as exc:
        logger.debug("read error in shadow-eval: %s", exc)
        return [_reply(msg, err=str(exc), status=["done", "eval-error"])]

    return [_reply(msg, value=pr_str(result), ns=ns, status=["done"])]


def _clear(msg: Message, session: Session) -> List[Message]:
    count = shadow_clear(msg.get("ns"), session=session)
    return [_reply(msg, cleared=count, status=["done"])]


def _list(msg: Message, session: Session) -> List[Message]:
    ns = session.namespace(msg.get("ns"))
    shadows = {name: pr_str(value) for name, value in ns.shadow_snapshot().items()}
    return [_reply(msg, shadows=shadows, ns=ns.name, status=["done"])]


_HANDLERS: Dict[str, Callable[[Message, Session], List[Message]]] = {
    "shadow-eval": _eval,
    "shadow-clear": _clear,
    "shadow-list": _list,
}


def wrap_shadows(handler: Handler, session: Optional[Session] = None) -> Handler:
    session = session if session is not None else Session()

    def shadow_handler(msg: Message) -> List[Message]:
        op = msg.get("op")
        own = _HANDLERS.get(op)

        if own is None:
            return handler(msg)

        logger.debug("handling op %s", op)
        return own(msg, session)

    return shadow_handler


def unknown_op(msg: Message) -> List[Message]:
    """Terminal handler: answers every op with `unknown-op`."""
    return [_reply(msg, status=["done", "error", "unknown-op"])]
