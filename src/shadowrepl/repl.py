"""Interactive REPL for shadowrepl, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError
from .repl_highlight import ShadowLexer
from .runner import configure_logging
from .session import Session
from .shadow import reval
from .token_types import CLOSERS, OPENERS
from .types import ShadowRuntimeError, Value
from .utils import debug_py_trace_enabled, default_namespace, pr_str

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[​‌‍﻿ \r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Forget every namespace var", ""),
    "/context": ("Set or drop the binding context for shadow evaluation", "[TEXT]"),
    "/shadows": ("List the shadows of the current namespace", ""),
    "/shadow-clear": ("Clear the shadows of the current namespace", ""),
    "/ns": ("Switch namespace", "NAME"),
}

_TRACE_VAR = "SHADOWREPL_DEBUG_PY_TRACE"


class ReplState:
    """Mutable REPL state so slash commands can swap it."""

    def __init__(self, session: Optional[Session] = None, ns: Optional[str] = None):
        self.session = session if session is not None else Session()
        self.ns = ns or default_namespace()
        self.context: Optional[str] = None


def open_depth(text: str) -> int:
    """Count of unclosed delimiters in *text*; 0 on lex errors so the reader reports them."""
    try:
        tokens = tokenize(text)
    except LexError:
        return 0

    depth = 0
    for tok in tokens:
        if tok.type in OPENERS:
            depth += 1
        elif tok.type in CLOSERS:
            depth -= 1

    return max(depth, 0)


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _handle_slash(line: str, state: ReplState) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            os.environ[_TRACE_VAR] = "1"
        elif arg.lower() in ("off", "0", "false", "no"):
            os.environ.pop(_TRACE_VAR, None)
        elif arg == "":
            if debug_py_trace_enabled():
                os.environ.pop(_TRACE_VAR, None)
            else:
                os.environ[_TRACE_VAR] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state_name = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state_name}")
        return True

    if cmd == "/reset":
        state.session.reset()
        print("Environment reset.")
        return True

    if cmd == "/context":
        state.context = arg or None
        print(f"Context: {state.context}" if state.context else "Context cleared.")
        return True

    if cmd == "/shadows":
        snapshot = state.session.namespace(state.ns).shadow_snapshot()
        if not snapshot:
            print("No shadows.")
        for name, value in snapshot.items():
            print(f"{name} = {pr_str(value)}")
        return True

    if cmd == "/shadow-clear":
        count = state.session.namespace(state.ns).shadow_clear()
        print(f"Cleared {count} shadow(s).")
        return True

    if cmd == "/ns":
        if not arg:
            print(state.ns)
            return True
        state.ns = state.session.namespace(arg).name
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def repl_eval(text: str, state: ReplState) -> Value:
    """Plain evaluation, or shadow evaluation while a context is set."""
    if state.context is not None:
        return reval(text, state.context, "<repl>", None, session=state.session, ns=state.ns)

    return state.session.eval_string(text, ns=state.ns)


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    state = ReplState()

    history = InMemoryHistory()
    lexer = ShadowLexer()

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        if text.startswith("/") or open_depth(text) == 0:
            buf.validate_and_handle()
            return

        depth = open_depth(text)
        buf.insert_text("\n" + "  " * depth)

    prompt: PromptSession[str] = PromptSession(
        history=history,
        lexer=lexer,
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("shadowrepl - Ctrl-D to exit, / for commands")

    while True:
        try:
            text = prompt.prompt(f"{state.ns}=> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if _handle_slash(text, state):
            continue

        try:
            result = repl_eval(text, state)
        except (ParseError, LexError, ShadowRuntimeError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            if debug_py_trace_enabled():
                print("\nPython traceback:", file=sys.stderr)
                print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")
            continue

        print(pr_str(result))


def main() -> None:
    configure_logging()
    repl()


if __name__ == "__main__":
    main()
