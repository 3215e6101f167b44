"""Shared helpers for working with the reader's Tree/Token nodes.

The reader builds plain `lark.Tree` / `lark.Token` nodes so syntax trees can be
inspected and pretty-printed with Lark's own tooling.
"""
from __future__ import annotations
from typing import List, Optional

from lark import Token, Tree
from lark.tree import Meta
from typing_extensions import TypeAlias, TypeGuard


Node: TypeAlias = Tree | Token


def make_meta(line: int, column: int) -> Meta:
    meta = Meta()
    meta.line = line
    meta.column = column
    meta.empty = False
    return meta


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Node) -> Optional[str]:
    return str(node.data) if is_tree(node) else None

def tree_children(node: Node) -> List[Node]:
    if not is_tree(node):
        return []

    children = getattr(node, "children", None)
    if children is None:
        return []

    return list(children)

def node_position(node: Node) -> tuple[Optional[int], Optional[int]]:
    if is_token(node):
        return node.line, node.column

    meta = getattr(node, "meta", None)
    if meta is None or getattr(meta, "empty", True):
        return None, None

    return getattr(meta, "line", None), getattr(meta, "column", None)

