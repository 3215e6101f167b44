from __future__ import annotations

from fractions import Fraction

import pytest
from lark import Token, Tree

from shadowrepl.lower import read_all, read_string
from shadowrepl.parser_rd import ParseError, parse_source
from shadowrepl.types import Keyword, Map, SList, SSet, Symbol, Vector

ATOM_CASES = [
    pytest.param("42", 42, id="int"),
    pytest.param("-3", -3, id="negative-int"),
    pytest.param("1.5", 1.5, id="float"),
    pytest.param("1/2", Fraction(1, 2), id="ratio"),
    pytest.param("4/2", 2, id="ratio-whole"),
    pytest.param('"a\\nb"', "a\nb", id="string-escape"),
    pytest.param('"\\u0041"', "A", id="string-unicode"),
    pytest.param(":k", Keyword("k"), id="keyword"),
    pytest.param("sym", Symbol("sym"), id="symbol"),
    pytest.param("nil", None, id="nil"),
    pytest.param("true", True, id="true"),
    pytest.param("false", False, id="false"),
]

COLLECTION_CASES = [
    pytest.param("(f 1)", SList([Symbol("f"), 1]), id="list"),
    pytest.param("[1 [2]]", Vector([1, Vector([2])]), id="nested-vector"),
    pytest.param("{:a 1 :b 2}", Map({Keyword("a"): 1, Keyword("b"): 2}), id="map"),
    pytest.param("#{1 2}", SSet([1, 2]), id="set"),
    pytest.param("'x", SList([Symbol("quote"), Symbol("x")]), id="quote"),
    pytest.param("@a", SList([Symbol("deref"), Symbol("a")]), id="deref"),
    pytest.param("[1 #_ 2 3]", Vector([1, 3]), id="discard"),
    pytest.param("()", SList([]), id="empty-list"),
]

ERROR_CASES = [
    pytest.param("(f 1", "Unbalanced '('", id="unbalanced"),
    pytest.param("(f 1]", "Mismatched delimiter", id="mismatched"),
    pytest.param(")", "Unmatched delimiter", id="stray-closer"),
    pytest.param("{:a}", "even number of forms", id="odd-map"),
    pytest.param("'", "Expected a form", id="dangling-quote"),
    pytest.param("(#_)", "Expected a form", id="dangling-discard"),
    pytest.param('"\\q"', "Unsupported escape", id="bad-escape"),
]


@pytest.mark.parametrize("source,expected", ATOM_CASES)
def test_atoms(source: str, expected: object) -> None:
    value = read_string(source)
    assert value == expected
    assert type(value) is type(expected)


@pytest.mark.parametrize("source,expected", COLLECTION_CASES)
def test_collections(source: str, expected: object) -> None:
    value = read_string(source)
    assert value == expected
    assert type(value) is type(expected)


@pytest.mark.parametrize("source,message", ERROR_CASES)
def test_parse_errors(source: str, message: str) -> None:
    with pytest.raises(ParseError) as info:
        read_all(source)
    assert message in str(info.value)


def test_parse_error_carries_position() -> None:
    with pytest.raises(ParseError) as info:
        read_all("(let [x 1]\n  (f x]")
    assert info.value.line == 2
    assert info.value.column == 7


def test_syntax_tree_uses_lark_nodes() -> None:
    tree = parse_source("(f [1] :k)")
    assert isinstance(tree, Tree)
    assert tree.data == "forms"

    form = tree.children[0]
    assert form.data == "list"
    assert form.meta.line == 1 and form.meta.column == 1

    head = form.children[0]
    assert isinstance(head, Token)
    assert head.type == "SYMBOL"
    assert form.children[1].data == "vector"


def test_lists_keep_position_meta() -> None:
    forms = read_all("1\n  (inc x)")
    assert forms[1].meta == {Keyword("line"): 2, Keyword("column"): 3}


def test_metadata_attaches_to_collections() -> None:
    form = read_string("^:private [x]")
    assert form == Vector([Symbol("x")])
    assert form.meta == {Keyword("private"): True}

    tagged = read_string("^{:doc \"d\"} (f)")
    assert tagged.meta[Keyword("doc")] == "d"
    assert tagged.meta[Keyword("line")] == 1


def test_read_all_returns_every_form() -> None:
    assert read_all("x1 (range 10)") == [Symbol("x1"), SList([Symbol("range"), 10])]


def test_read_string_empty() -> None:
    with pytest.raises(ParseError):
        read_string("   ")
    assert read_string("; only a comment", eof_value=None) is None


def test_symbol_namespace_split() -> None:
    sym = read_string("user/sq")
    assert sym.namespace == "user"
    assert sym.short == "sq"
    assert Symbol("/").namespace is None
