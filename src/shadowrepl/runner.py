from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import Optional

from .lexer_rd import LexError
from .parser_rd import ParseError
from .session import Session
from .shadow import reval
from .types import ShadowRuntimeError, Value
from .utils import debug_py_trace_enabled, log_level_name, pr_str

logger = logging.getLogger(__name__)

USAGE = "usage: shadowrepl [--context TEXT] [--file NAME] [--line N] [--ns NAME] [-v] [FILE|-|CODE]"


def run(src: str, session: Optional[Session] = None, ns: Optional[str] = None) -> Value:
    session = session if session is not None else Session()
    return session.eval_string(src, ns=ns)


def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.is_file():
        return candidate.read_text(encoding="utf-8")

    return arg


def _flag_value(it, flag: str) -> str:
    try:
        return next(it)
    except StopIteration:
        raise SystemExit(f"{flag} flag requires a value") from None


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr handler to the package logger; repeated calls only adjust the level."""
    level = logging.DEBUG if verbose else getattr(logging, log_level_name(), logging.WARNING)

    package_logger = logging.getLogger("shadowrepl")
    package_logger.setLevel(level)

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(handler)

    return package_logger


def main(argv: Optional[list] = None) -> int:
    context: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None
    ns: Optional[str] = None
    verbose = False
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token in ("-h", "--help"):
            print(USAGE)
            return 0

        if token in ("-v", "--verbose"):
            verbose = True
            continue

        if token == "--context":
            context = _flag_value(it, token)
            continue

        if token == "--file":
            file = _flag_value(it, token)
            continue

        if token == "--line":
            raw = _flag_value(it, token)
            try:
                line = int(raw)
            except ValueError:
                raise SystemExit(f"--line expects an integer; got {raw!r}") from None
            continue

        if token == "--ns":
            ns = _flag_value(it, token)
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    configure_logging(verbose)
    source = _load_source(arg or "-")
    session = Session()

    try:
        if context is not None or file is not None or line is not None:
            logger.debug("routing input through shadow evaluation")
            result = reval(source, context, file, line, session=session, ns=ns)
        else:
            result = run(source, session=session, ns=ns)
    except (ShadowRuntimeError, LexError, ParseError) as exc:
        if debug_py_trace_enabled():
            traceback.print_exc()
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(pr_str(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
