from __future__ import annotations

from typing import List

import pytest

from shadowrepl.middleware import EvalRequest, RequestError, unknown_op, wrap_shadows
from tests.support.harness import fresh_session

CONTEXT = "[x1 (range 10) x2 (map sq x1) x3 (partition 2 x2)]"


@pytest.fixture
def session():
    s = fresh_session()
    s.eval_string("(defn sq [x] (* x x))")
    return s


@pytest.fixture
def handler(session):
    return wrap_shadows(unknown_op, session)


@pytest.mark.parametrize(
    "msg,expected",
    [
        pytest.param({"code": "(f)"}, EvalRequest(code="(f)"), id="code-only"),
        pytest.param(
            {"code": "(f)", "context": "[a 1]", "file": "a.clj", "line": "12", "ns": "app"},
            EvalRequest(code="(f)", context="[a 1]", file="a.clj", line=12, ns="app"),
            id="all-fields",
        ),
        pytest.param({"code": "(f)", "context": "  "}, EvalRequest(code="(f)"), id="blank-context"),
    ],
)
def test_request_from_message(msg: dict, expected: EvalRequest) -> None:
    assert EvalRequest.from_message(msg) == expected


@pytest.mark.parametrize(
    "msg",
    [
        pytest.param({}, id="missing-code"),
        pytest.param({"code": "   "}, id="blank-code"),
        pytest.param({"code": "(f)", "line": "twelve"}, id="bad-line"),
        pytest.param({"code": "(f)", "context": 5}, id="bad-context"),
    ],
)
def test_request_validation(msg: dict) -> None:
    with pytest.raises(RequestError):
        EvalRequest.from_message(msg)


def test_shadow_eval_op(handler, session) -> None:
    responses = handler({"op": "shadow-eval", "id": "7", "code": "(partition 2 x2)", "context": CONTEXT})

    assert responses == [
        {
            "id": "7",
            "value": "{x3 ((0 1) (4 9) (16 25) (36 49) (64 81))}",
            "ns": "user",
            "status": ["done"],
        }
    ]
    assert session.store.contains("user", "x3")


def test_shadow_eval_runtime_error_is_a_value(handler) -> None:
    [response] = handler({"op": "shadow-eval", "code": "(/ 1 0)"})
    assert response["value"].startswith('"error: Divide by zero')
    assert response["status"] == ["done"]


def test_shadow_eval_read_error(handler) -> None:
    [response] = handler({"op": "shadow-eval", "code": "(inc 1", "context": CONTEXT})
    assert "Unbalanced" in response["err"]
    assert response["status"] == ["done", "eval-error"]


def test_shadow_eval_bad_request(handler) -> None:
    [response] = handler({"op": "shadow-eval", "id": "1"})
    assert response["id"] == "1"
    assert response["status"] == ["done", "error"]


def test_shadow_list_and_clear(handler, session) -> None:
    handler({"op": "shadow-eval", "code": "(partition 2 x2)", "context": CONTEXT})

    [listing] = handler({"op": "shadow-list"})
    assert listing["shadows"]["x1"] == "(0 1 2 3 4 5 6 7 8 9)"
    assert sorted(listing["shadows"]) == ["x1", "x2", "x3"]

    [cleared] = handler({"op": "shadow-clear", "ns": "user"})
    assert cleared == {"cleared": 3, "status": ["done"]}
    assert session.store.names("user") == []


def test_other_ops_fall_through(session) -> None:
    seen: List[dict] = []

    def downstream(msg: dict) -> List[dict]:
        seen.append(msg)
        return [{"status": ["done"], "value": "downstream"}]

    handler = wrap_shadows(downstream, session)
    assert handler({"op": "eval", "code": "1"}) == [{"status": ["done"], "value": "downstream"}]
    assert seen == [{"op": "eval", "code": "1"}]


def test_unknown_op_terminal(handler) -> None:
    [response] = handler({"op": "describe", "session": "s1"})
    assert response == {"session": "s1", "status": ["done", "error", "unknown-op"]}


def test_namespace_selects_store(handler, session) -> None:
    handler({"op": "shadow-eval", "code": "a (+ 1 1)", "context": "[a (+ 1 1)]", "ns": "app"})
    assert session.store.get("app", "a") == 2
    assert not session.store.contains("user", "a")


def test_shadow_eval_stray_recur_is_a_value(handler) -> None:
    [response] = handler({"op": "shadow-eval", "code": "(recur 1)"})
    assert response["value"].startswith('"error: Cannot recur across try')
    assert response["status"] == ["done"]
