from __future__ import annotations

from fractions import Fraction

import pytest

from shadowrepl.types import (
    Atom,
    ExInfo,
    Keyword,
    Map,
    SList,
    SSet,
    Symbol,
    ThrownError,
    Var,
    Vector,
)
from shadowrepl.utils import lisp_equals, pr_str, to_str

PRINT_CASES = [
    pytest.param(None, "nil", "", id="nil"),
    pytest.param(True, "true", "true", id="true"),
    pytest.param(3, "3", "3", id="int"),
    pytest.param(Fraction(1, 2), "1/2", "1/2", id="ratio"),
    pytest.param(float("nan"), "##NaN", "##NaN", id="nan"),
    pytest.param(float("-inf"), "##-Inf", "##-Inf", id="neg-inf"),
    pytest.param('a"b\n', '"a\\"b\\n"', 'a"b\n', id="string"),
    pytest.param(Symbol("x"), "x", "x", id="symbol"),
    pytest.param(Keyword("k"), ":k", ":k", id="keyword"),
    pytest.param(Vector([1, "s"]), '[1 "s"]', '[1 "s"]', id="vector-nested-readable"),
    pytest.param(SList([SList([0, 1])]), "((0 1))", "((0 1))", id="nested-list"),
    pytest.param(Map({Symbol("x3"): SList([1])}), "{x3 (1)}", "{x3 (1)}", id="map"),
    pytest.param(SSet([1]), "#{1}", "#{1}", id="set"),
    pytest.param(Atom(None), "#atom[nil]", "#atom[nil]", id="atom"),
    pytest.param(Var("user", "x"), "#'user/x", "#'user/x", id="var"),
    pytest.param(ExInfo("boom"), "boom", "boom", id="error-message"),
    pytest.param(ThrownError("s"), '"s"', "s", id="thrown-value"),
]

EQUALITY_CASES = [
    pytest.param(1, 1.0, True, id="int-float"),
    pytest.param(1, True, False, id="number-bool"),
    pytest.param(None, False, False, id="nil-false"),
    pytest.param(Vector([1]), SList([1]), True, id="vector-list"),
    pytest.param(Vector([1]), SSet([1]), False, id="vector-set"),
    pytest.param(Map({Keyword("a"): Vector([1])}), Map({Keyword("a"): SList([1])}), True, id="map-deep"),
    pytest.param(Symbol("a"), Keyword("a"), False, id="symbol-keyword"),
    pytest.param("a", Symbol("a"), False, id="string-symbol"),
]


@pytest.mark.parametrize("value,readable,plain", PRINT_CASES)
def test_printing(value: object, readable: str, plain: str) -> None:
    assert pr_str(value) == readable
    assert to_str(value) == plain


@pytest.mark.parametrize("lhs,rhs,expected", EQUALITY_CASES)
def test_lisp_equals(lhs: object, rhs: object, expected: bool) -> None:
    assert lisp_equals(lhs, rhs) is expected
    assert lisp_equals(rhs, lhs) is expected
