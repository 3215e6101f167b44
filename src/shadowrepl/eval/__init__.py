"""Special-form handlers for the shadowrepl evaluator."""

__all__ = [
    "common",
    "control",
    "destructure",
    "fn",
    "helpers",
    "let",
]
