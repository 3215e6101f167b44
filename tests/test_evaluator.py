from __future__ import annotations

from textwrap import dedent

import pytest

from shadowrepl.types import (
    ArityError,
    EvalError,
    Keyword,
    ShadowArithmeticError,
    ShadowTypeError,
    ThrownError,
    UnboundSymbolError,
    Var,
)
from tests.support.harness import fresh_session, run_program, run_runtime_case

SCENARIOS = [
    pytest.param("(+ 1 2)", ("value", 3), None, id="call-builtin"),
    pytest.param("'(a b)", ("printed", "(a b)"), None, id="quote"),
    pytest.param("(if nil 1 2)", ("value", 2), None, id="if-nil-falsey"),
    pytest.param("(if 0 1 2)", ("value", 1), None, id="if-zero-truthy"),
    pytest.param("(if false 1)", ("value", None), None, id="if-no-else"),
    pytest.param("(do 1 2 3)", ("value", 3), None, id="do"),
    pytest.param("(when true 1 2)", ("value", 2), None, id="when"),
    pytest.param("(when-not true 1)", ("value", None), None, id="when-not"),
    pytest.param("(cond false 1 :else 2)", ("value", 2), None, id="cond-else"),
    pytest.param("(and 1 nil 2)", ("value", None), None, id="and-short-circuit"),
    pytest.param("(or nil false 3)", ("value", 3), None, id="or"),
    pytest.param("(let [x 1 y (+ x 1)] (* x y))", ("value", 2), None, id="let-sequential"),
    pytest.param("(let [[a b & more] [1 2 3 4]] [a b more])", ("printed", "[1 2 (3 4)]"), None, id="let-vector-destructure"),
    pytest.param("(let [[a :as all] [1 2]] all)", ("printed", "[1 2]"), None, id="let-vector-as"),
    pytest.param("(let [{:keys [a b] :or {b 5}} {:a 1}] [a b])", ("printed", "[1 5]"), None, id="let-map-keys-or"),
    pytest.param("(let [{:strs [a]} {\"a\" 9}] a)", ("value", 9), None, id="let-map-strs"),
    pytest.param("(let [{x :x :as m} {:x 3}] [x (count m)])", ("printed", "[3 1]"), None, id="let-map-explicit"),
    pytest.param("((fn [x] (* x x)) 4)", ("value", 16), None, id="fn-call"),
    pytest.param("((fn [& xs] xs) 1 2)", ("printed", "(1 2)"), None, id="fn-variadic"),
    pytest.param("((fn [& xs] xs))", ("value", None), None, id="fn-variadic-empty"),
    pytest.param(
        dedent(
            """\
            (defn fact [n] (if (<= n 1) 1 (* n (fact (dec n)))))
            (fact 10)
            """
        ),
        ("value", 3628800),
        None,
        id="defn-recursive",
    ),
    pytest.param("(loop [i 0 acc 0] (if (< i 5) (recur (inc i) (+ acc i)) acc))", ("value", 10), None, id="loop-recur"),
    pytest.param("(defn count-down [n] (if (zero? n) :done (recur (dec n)))) (count-down 100000)", ("printed", ":done"), None, id="fn-recur-deep"),
    pytest.param("(when-let [x (first [7])] (inc x))", ("value", 8), None, id="when-let"),
    pytest.param("(if-let [x nil] 1 2)", ("value", 2), None, id="if-let-else"),
    pytest.param("(-> 5 (- 2) inc)", ("value", 4), None, id="thread-first"),
    pytest.param("(->> [1 2 3] (map inc) (reduce +))", ("value", 9), None, id="thread-last"),
    pytest.param("(for [x [1 2 3] :when (odd? x)] (* 10 x))", ("printed", "(10 30)"), None, id="for-when"),
    pytest.param("(for [x [1 2] y [:a :b]] [x y])", ("printed", "([1 :a] [1 :b] [2 :a] [2 :b])"), None, id="for-nested"),
    pytest.param("(for [x (range 10) :while (< x 3)] x)", ("printed", "(0 1 2)"), None, id="for-while"),
    pytest.param("(for [x [1 2] :let [y (* x x)]] y)", ("printed", "(1 4)"), None, id="for-let"),
    pytest.param("(let [a (atom 0)] (doseq [x [1 2 3]] (swap! a + x)) @a)", ("value", 6), None, id="doseq-atom"),
    pytest.param("(let [a (atom 0)] (dotimes [i 4] (swap! a + i)) (deref a))", ("value", 6), None, id="dotimes"),
    pytest.param("(:a {:a 1})", ("value", 1), None, id="keyword-call"),
    pytest.param("({:a 1} :b 2)", ("value", 2), None, id="map-call-default"),
    pytest.param("([10 20] 1)", ("value", 20), None, id="vector-call"),
    pytest.param("(#{1 2} 2)", ("value", 2), None, id="set-call"),
    pytest.param("(def x 5) x", ("value", 5), None, id="def-then-read"),
    pytest.param("(def x 5)", ("printed", "#'user/x"), None, id="def-returns-var"),
    pytest.param("(defonce x 1) (defonce x 2) x", ("value", 1), None, id="defonce"),
    pytest.param("(try (/ 1 0) (catch ArithmeticException e (ex-message e)))", ("value", "Divide by zero"), None, id="catch-arithmetic"),
    pytest.param("(try (throw (ex-info \"boom\" {:k 1})) (catch ExceptionInfo e (ex-data e)))", ("printed", "{:k 1}"), None, id="catch-ex-info"),
    pytest.param("(try (throw 42) (catch :default e e))", ("value", 42), None, id="catch-thrown-value"),
    pytest.param("(let [a (atom 0)] (try 1 (finally (reset! a 9))) @a)", ("value", 9), None, id="finally-runs"),
    pytest.param("(try (undefined-thing) (catch Exception e (str \"caught: \" (ex-message e))))", ("value", "caught: Unable to resolve symbol: undefined-thing"), None, id="catch-unbound"),
    pytest.param("(undefined-thing)", None, UnboundSymbolError, id="unbound-symbol"),
    pytest.param("((fn [x] x))", None, ArityError, id="arity-error"),
    pytest.param("(/ 1 0)", None, ShadowArithmeticError, id="divide-by-zero"),
    pytest.param("(+ 1 \"a\")", None, ShadowTypeError, id="type-error"),
    pytest.param("(1 2)", None, ShadowTypeError, id="call-non-fn"),
    pytest.param("(throw :oops)", None, ThrownError, id="throw-keyword"),
    pytest.param("(let [x] x)", None, EvalError, id="let-odd-bindings"),
    pytest.param("(loop [i 0] (recur 1 2))", None, EvalError, id="recur-mismatch"),
    pytest.param("(recur 1)", None, EvalError, id="recur-outside-loop"),
    pytest.param("(loop [i 0] (try (recur 1)))", None, EvalError, id="recur-across-try"),
    pytest.param("(def x) x", None, EvalError, id="unbound-var"),
    pytest.param("(try 1 (catch Bogus e 2))", ("value", 1), None, id="catch-unused-class-ok"),
    pytest.param("(try (/ 1 0) (catch Bogus e 2))", None, EvalError, id="catch-unknown-class"),
]


@pytest.mark.parametrize("source,expectation,expected_exc", SCENARIOS)
def test_eval_scenarios(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_runtime_errors_carry_location() -> None:
    with pytest.raises(UnboundSymbolError) as info:
        run_program("(do\n  (inc missing))")
    assert info.value.meta == {"line": 2, "column": 3}
    assert str(info.value).endswith("(line 2, col 3)")


def test_def_records_var_metadata() -> None:
    session = fresh_session()
    var = session.eval_string('(defn sq "squares" [x] (* x x))')
    assert isinstance(var, Var)

    meta = session.eval_string("(meta (var sq))")
    assert meta[Keyword("doc")] == "squares"
    assert meta[Keyword("line")] == 1


def test_defn_private_flag() -> None:
    session = fresh_session()
    session.eval_string("(defn- helper [] 1)")
    meta = session.eval_string("(meta (var helper))")
    assert meta[Keyword("private")] is True


def test_qualified_symbol_resolves_across_namespaces() -> None:
    session = fresh_session()
    session.eval_string("(def v 11)", ns="other")
    assert session.eval_string("(inc other/v)") == 12

    with pytest.raises(UnboundSymbolError):
        session.eval_string("nope/v")


def test_closures_capture_lexical_scope() -> None:
    result = run_program("(def add (let [n 10] (fn [x] (+ x n)))) (add 5)")
    assert result == 15


def test_reset_forgets_vars() -> None:
    session = fresh_session()
    session.eval_string("(def x 1)")
    session.reset()
    with pytest.raises(UnboundSymbolError):
        session.eval_string("x")
