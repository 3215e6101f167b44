from __future__ import annotations

import pytest

from shadowrepl.types import ArityError, EvalError, ExInfo, ShadowArithmeticError, ShadowTypeError
from tests.support.harness import fresh_session, run_runtime_case

ARITHMETIC = [
    pytest.param("(+)", ("value", 0), None, id="add-empty"),
    pytest.param("(- 5)", ("value", -5), None, id="negate"),
    pytest.param("(- 10 1 2)", ("value", 7), None, id="sub-chain"),
    pytest.param("(* 2 3 4)", ("value", 24), None, id="mul"),
    pytest.param("(/ 6 3)", ("value", 2), None, id="div-whole"),
    pytest.param("(/ 1 3)", ("printed", "1/3"), None, id="div-ratio"),
    pytest.param("(/ 1.0 4)", ("value", 0.25), None, id="div-float"),
    pytest.param("(+ 1/2 1/2)", ("value", 1), None, id="ratio-sum-normalizes"),
    pytest.param("(mod -7 3)", ("value", 2), None, id="mod-floors"),
    pytest.param("(rem -7 3)", ("value", -1), None, id="rem-truncates"),
    pytest.param("(quot 7 2)", ("value", 3), None, id="quot"),
    pytest.param("(max 1 5 3)", ("value", 5), None, id="max"),
    pytest.param("(abs -2)", ("value", 2), None, id="abs"),
    pytest.param("(inc 1.5)", ("value", 2.5), None, id="inc-float"),
    pytest.param("(mod 1 0)", None, ShadowArithmeticError, id="mod-zero"),
]

COMPARISON = [
    pytest.param("(= 1 1 1)", ("value", True), None, id="eq-chain"),
    pytest.param("(= [1 2] '(1 2))", ("value", True), None, id="eq-vector-list"),
    pytest.param("(= {:a [1]} {:a '(1)})", ("value", True), None, id="eq-map-deep"),
    pytest.param("(= 1 true)", ("value", False), None, id="eq-bool-number"),
    pytest.param("(= nil false)", ("value", False), None, id="eq-nil-false"),
    pytest.param("(not= 1 2)", ("value", True), None, id="not-eq"),
    pytest.param("(< 1 2 3)", ("value", True), None, id="lt-chain"),
    pytest.param("(< 1 3 2)", ("value", False), None, id="lt-chain-broken"),
    pytest.param("(>= 3 3 1)", ("value", True), None, id="gte"),
    pytest.param("(not nil)", ("value", True), None, id="not-nil"),
    pytest.param("(even? 4)", ("value", True), None, id="even"),
    pytest.param("(nil? nil)", ("value", True), None, id="nil-pred"),
    pytest.param("(map? {})", ("value", True), None, id="map-pred"),
    pytest.param("(fn? inc)", ("value", True), None, id="fn-pred"),
    pytest.param("(< 1 :a)", None, ShadowTypeError, id="lt-type-error"),
]

SEQUENCES = [
    pytest.param("(range 5)", ("printed", "(0 1 2 3 4)"), None, id="range"),
    pytest.param("(range 2 10 3)", ("printed", "(2 5 8)"), None, id="range-step"),
    pytest.param("(range 3 0 -1)", ("printed", "(3 2 1)"), None, id="range-down"),
    pytest.param("(range)", None, EvalError, id="range-without-end"),
    pytest.param("(first [])", ("value", None), None, id="first-empty"),
    pytest.param("(rest [1])", ("printed", "()"), None, id="rest-single"),
    pytest.param("(next [1])", ("value", None), None, id="next-single"),
    pytest.param("(cons 0 [1 2])", ("printed", "(0 1 2)"), None, id="cons"),
    pytest.param("(conj [1] 2 3)", ("printed", "[1 2 3]"), None, id="conj-vector"),
    pytest.param("(conj '(1) 2 3)", ("printed", "(3 2 1)"), None, id="conj-list"),
    pytest.param("(conj {:a 1} [:b 2])", ("printed", "{:a 1, :b 2}"), None, id="conj-map"),
    pytest.param("(into [] '(1 2))", ("printed", "[1 2]"), None, id="into-vector"),
    pytest.param("(concat [1] '(2) nil)", ("printed", "(1 2)"), None, id="concat"),
    pytest.param("(count {:a 1 :b 2})", ("value", 2), None, id="count-map"),
    pytest.param("(count nil)", ("value", 0), None, id="count-nil"),
    pytest.param("(nth [1 2] 5 :none)", ("printed", ":none"), None, id="nth-default"),
    pytest.param("(nth [1 2] 5)", None, EvalError, id="nth-out-of-bounds"),
    pytest.param("(take 2 (range 10))", ("printed", "(0 1)"), None, id="take"),
    pytest.param("(drop 8 (range 10))", ("printed", "(8 9)"), None, id="drop"),
    pytest.param("(map + [1 2 3] [10 20])", ("printed", "(11 22)"), None, id="map-multi"),
    pytest.param("(mapv inc [1 2])", ("printed", "[2 3]"), None, id="mapv"),
    pytest.param("(map-indexed vector [:a :b])", ("printed", "([0 :a] [1 :b])"), None, id="map-indexed"),
    pytest.param("(filter even? (range 6))", ("printed", "(0 2 4)"), None, id="filter"),
    pytest.param("(remove even? (range 6))", ("printed", "(1 3 5)"), None, id="remove"),
    pytest.param("(reduce + [])", ("value", 0), None, id="reduce-empty"),
    pytest.param("(reduce conj [] '(1 2))", ("printed", "[1 2]"), None, id="reduce-init"),
    pytest.param("(partition 2 (range 5))", ("printed", "((0 1) (2 3))"), None, id="partition-drops-tail"),
    pytest.param("(partition 2 1 [1 2 3])", ("printed", "((1 2) (2 3))"), None, id="partition-step"),
    pytest.param("(partition-all 2 (range 5))", ("printed", "((0 1) (2 3) (4))"), None, id="partition-all"),
    pytest.param("(interleave [1 2] [:a :b])", ("printed", "(1 :a 2 :b)"), None, id="interleave"),
    pytest.param("(reverse [1 2 3])", ("printed", "(3 2 1)"), None, id="reverse"),
    pytest.param("(sort [3 1 2])", ("printed", "(1 2 3)"), None, id="sort"),
    pytest.param("(sort > [3 1 2])", ("printed", "(3 2 1)"), None, id="sort-comparator"),
    pytest.param("(sort-by - [1 3 2])", ("printed", "(3 2 1)"), None, id="sort-by"),
    pytest.param("(seq [])", ("value", None), None, id="seq-empty"),
    pytest.param("(empty? \"\")", ("value", True), None, id="empty-string"),
    pytest.param("(apply + 1 [2 3])", ("value", 6), None, id="apply"),
    pytest.param("((comp inc inc) 1)", ("value", 3), None, id="comp"),
    pytest.param("((partial + 10) 5)", ("value", 15), None, id="partial"),
    pytest.param("(frequencies [:a :b :a])", ("printed", "{:a 2, :b 1}"), None, id="frequencies"),
    pytest.param("(first 5)", None, ShadowTypeError, id="seq-of-number"),
    pytest.param("(first)", None, ArityError, id="first-arity"),
]

MAPS = [
    pytest.param("(get {:a 1} :b 0)", ("value", 0), None, id="get-default"),
    pytest.param("(get [1 2] 1)", ("value", 2), None, id="get-vector"),
    pytest.param("(get-in {:a {:b 3}} [:a :b])", ("value", 3), None, id="get-in"),
    pytest.param("(get-in {:a nil} [:a :b] :x)", ("printed", ":x"), None, id="get-in-default"),
    pytest.param("(assoc {} :a 1 :b 2)", ("printed", "{:a 1, :b 2}"), None, id="assoc"),
    pytest.param("(assoc [1 2] 2 3)", ("printed", "[1 2 3]"), None, id="assoc-vector-append"),
    pytest.param("(dissoc {:a 1 :b 2} :a)", ("printed", "{:b 2}"), None, id="dissoc"),
    pytest.param("(keys {:a 1})", ("printed", "(:a)"), None, id="keys"),
    pytest.param("(vals {})", ("value", None), None, id="vals-empty"),
    pytest.param("(contains? {:a nil} :a)", ("value", True), None, id="contains-nil-value"),
    pytest.param("(contains? [5] 0)", ("value", True), None, id="contains-vector-index"),
    pytest.param("(merge {:a 1} nil {:a 2 :b 3})", ("printed", "{:a 2, :b 3}"), None, id="merge"),
    pytest.param("(select-keys {:a 1 :b 2} [:b :c])", ("printed", "{:b 2}"), None, id="select-keys"),
    pytest.param("(update {:n 1} :n + 10)", ("printed", "{:n 11}"), None, id="update"),
    pytest.param("(zipmap [:a :b] [1 2])", ("printed", "{:a 1, :b 2}"), None, id="zipmap"),
]

STRINGS = [
    pytest.param("(str \"a\" 1 nil :k)", ("value", "a1:k"), None, id="str-concat"),
    pytest.param("(str [1 \"x\"])", ("value", "[1 \"x\"]"), None, id="str-nested-readable"),
    pytest.param("(pr-str \"a\" nil)", ("value", "\"a\" nil"), None, id="pr-str"),
    pytest.param("(subs \"hello\" 1 3)", ("value", "el"), None, id="subs"),
    pytest.param("(name :k)", ("value", "k"), None, id="name-keyword"),
    pytest.param("(name 'ns/x)", ("value", "x"), None, id="name-qualified"),
    pytest.param("(keyword \"k\")", ("printed", ":k"), None, id="keyword"),
    pytest.param("(symbol \"s\")", ("printed", "s"), None, id="symbol"),
    pytest.param("(subs \"abc\" 2 9)", None, EvalError, id="subs-out-of-range"),
]

ATOMS_AND_ERRORS = [
    pytest.param("(let [a (atom 1)] (swap! a + 2 3) @a)", ("value", 6), None, id="swap-extra-args"),
    pytest.param("(let [a (atom 1)] (reset! a 5))", ("value", 5), None, id="reset"),
    pytest.param("(atom [1])", ("printed", "#atom[[1]]"), None, id="atom-printed"),
    pytest.param("(deref 5)", None, ShadowTypeError, id="deref-non-atom"),
    pytest.param("(ex-info \"m\" {:a 1})", ("type", ExInfo), None, id="ex-info"),
    pytest.param("(ex-message (ex-info \"m\" {}))", ("value", "m"), None, id="ex-message"),
    pytest.param("(ex-data 1)", ("value", None), None, id="ex-data-non-error"),
    pytest.param("(ex-info 1 {})", None, ShadowTypeError, id="ex-info-bad-message"),
]


@pytest.mark.parametrize(
    "source,expectation,expected_exc",
    ARITHMETIC + COMPARISON + SEQUENCES + MAPS + STRINGS + ATOMS_AND_ERRORS,
)
def test_stdlib(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_println_writes_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    session = fresh_session()
    assert session.eval_string('(println "a" 1 nil)') is None
    session.eval_string('(prn "a" :k)')

    out = capsys.readouterr().out
    assert out == 'a 1 \n"a" :k\n'
