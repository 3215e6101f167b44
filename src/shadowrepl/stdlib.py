"""Built-in stdlib functions (println, map, partition, ...) registered via runtime."""

from __future__ import annotations

import functools
import operator
import sys
from fractions import Fraction
from typing import Any, Callable, List

from .runtime import call_value, ensure_seq, register_stdlib, type_name
from .types import (
    ArityError,
    Atom,
    Builtin,
    EvalError,
    ExInfo,
    Fn,
    Frame,
    Keyword,
    Map,
    SList,
    SSet,
    ShadowArithmeticError,
    ShadowRuntimeError,
    ShadowTypeError,
    Symbol,
    ThrownError,
    Value,
    Var,
    Vector,
)
from .eval.helpers import is_truthy
from .utils import is_number, is_sequential, lisp_equals, pr_str, to_str


def _expect_number(name: str, value: Value) -> Any:
    if not is_number(value):
        raise ShadowTypeError(f"{name} expects numbers; got {type_name(value)}")
    return value


def _expect_min(name: str, args: List[Value], count: int) -> None:
    if len(args) < count:
        raise ArityError(f"Wrong number of args ({len(args)}) passed to: {name}")


def _expect_range(name: str, args: List[Value], low: int, high: int) -> None:
    if not low <= len(args) <= high:
        raise ArityError(f"Wrong number of args ({len(args)}) passed to: {name}")


def _normalize(value: Any) -> Any:
    if isinstance(value, Fraction) and value.denominator == 1:
        return int(value)
    return value


def _as_seq(name: str, value: Value) -> List[Value]:
    return ensure_seq(value, name)


def _count_arg(name: str, value: Value) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ShadowTypeError(f"{name} expects an integer; got {type_name(value)}")
    return value

# ---------- arithmetic ----------

@register_stdlib("+")
def std_add(_frame: Frame, args: List[Value]) -> Value:
    return _normalize(sum((_expect_number("+", a) for a in args), 0))


@register_stdlib("*")
def std_mul(_frame: Frame, args: List[Value]) -> Value:
    return _normalize(functools.reduce(operator.mul, (_expect_number("*", a) for a in args), 1))


@register_stdlib("-")
def std_sub(_frame: Frame, args: List[Value]) -> Value:
    _expect_min("-", args, 1)
    nums = [_expect_number("-", a) for a in args]
    if len(nums) == 1:
        return -nums[0]
    return _normalize(functools.reduce(operator.sub, nums))


def _divide(a: Any, b: Any) -> Any:
    if b == 0:
        raise ShadowArithmeticError("Divide by zero")
    if isinstance(a, float) or isinstance(b, float):
        return a / b
    return _normalize(Fraction(a) / Fraction(b))


@register_stdlib("/")
def std_div(_frame: Frame, args: List[Value]) -> Value:
    _expect_min("/", args, 1)
    nums = [_expect_number("/", a) for a in args]
    if len(nums) == 1:
        return _divide(1, nums[0])
    return functools.reduce(_divide, nums)


@register_stdlib("inc", arity=1)
def std_inc(_frame: Frame, args: List[Value]) -> Value:
    return _expect_number("inc", args[0]) + 1


@register_stdlib("dec", arity=1)
def std_dec(_frame: Frame, args: List[Value]) -> Value:
    return _expect_number("dec", args[0]) - 1


@register_stdlib("mod", arity=2)
def std_mod(_frame: Frame, args: List[Value]) -> Value:
    a, b = (_expect_number("mod", x) for x in args)
    if b == 0:
        raise ShadowArithmeticError("Divide by zero")
    return a % b


@register_stdlib("rem", arity=2)
def std_rem(_frame: Frame, args: List[Value]) -> Value:
    a, b = (_expect_number("rem", x) for x in args)
    if b == 0:
        raise ShadowArithmeticError("Divide by zero")
    return a - b * int(a / b)


@register_stdlib("quot", arity=2)
def std_quot(_frame: Frame, args: List[Value]) -> Value:
    a, b = (_expect_number("quot", x) for x in args)
    if b == 0:
        raise ShadowArithmeticError("Divide by zero")
    return int(a / b)


@register_stdlib("max")
def std_max(_frame: Frame, args: List[Value]) -> Value:
    _expect_min("max", args, 1)
    return max(_expect_number("max", a) for a in args)


@register_stdlib("min")
def std_min(_frame: Frame, args: List[Value]) -> Value:
    _expect_min("min", args, 1)
    return min(_expect_number("min", a) for a in args)


@register_stdlib("abs", arity=1)
def std_abs(_frame: Frame, args: List[Value]) -> Value:
    return abs(_expect_number("abs", args[0]))

# ---------- comparison ----------

@register_stdlib("=")
def std_eq(_frame: Frame, args: List[Value]) -> bool:
    _expect_min("=", args, 1)
    return all(lisp_equals(a, b) for a, b in zip(args, args[1:]))


@register_stdlib("not=")
def std_not_eq(frame: Frame, args: List[Value]) -> bool:
    return not std_eq(frame, args)


def _chain_compare(name: str, op: Callable[[Any, Any], bool]) -> None:
    @register_stdlib(name)
    def _compare(_frame: Frame, args: List[Value]) -> bool:
        _expect_min(name, args, 1)
        nums = [_expect_number(name, a) for a in args]
        return all(op(a, b) for a, b in zip(nums, nums[1:]))


_chain_compare("<", operator.lt)
_chain_compare(">", operator.gt)
_chain_compare("<=", operator.le)
_chain_compare(">=", operator.ge)
_chain_compare("==", operator.eq)


@register_stdlib("not", arity=1)
def std_not(_frame: Frame, args: List[Value]) -> bool:
    return not is_truthy(args[0])


@register_stdlib("compare", arity=2)
def std_compare(_frame: Frame, args: List[Value]) -> int:
    a, b = args
    if a is None or b is None:
        return (a is not None) - (b is not None)
    return (a > b) - (a < b)

# ---------- predicates ----------

def _predicate(name: str, test: Callable[[Value], bool]) -> None:
    @register_stdlib(name, arity=1)
    def _pred(_frame: Frame, args: List[Value]) -> bool:
        return bool(test(args[0]))


_predicate("nil?", lambda v: v is None)
_predicate("some?", lambda v: v is not None)
_predicate("true?", lambda v: v is True)
_predicate("false?", lambda v: v is False)
_predicate("number?", is_number)
_predicate("integer?", lambda v: isinstance(v, int) and not isinstance(v, bool))
_predicate("string?", lambda v: isinstance(v, str))
_predicate("symbol?", lambda v: isinstance(v, Symbol))
_predicate("keyword?", lambda v: isinstance(v, Keyword))
_predicate("fn?", lambda v: isinstance(v, (Fn, Builtin)))
_predicate("vector?", lambda v: isinstance(v, Vector))
_predicate("list?", lambda v: isinstance(v, SList))
_predicate("seq?", lambda v: isinstance(v, SList))
_predicate("map?", lambda v: isinstance(v, dict))
_predicate("set?", lambda v: isinstance(v, (SSet, frozenset)))
_predicate("coll?", lambda v: isinstance(v, (SList, Vector, dict, SSet, frozenset)))
_predicate("sequential?", is_sequential)
_predicate("zero?", lambda v: _expect_number("zero?", v) == 0)
_predicate("pos?", lambda v: _expect_number("pos?", v) > 0)
_predicate("neg?", lambda v: _expect_number("neg?", v) < 0)
_predicate("even?", lambda v: _count_arg("even?", v) % 2 == 0)
_predicate("odd?", lambda v: _count_arg("odd?", v) % 2 == 1)

# ---------- sequences ----------

@register_stdlib("list")
def std_list(_frame: Frame, args: List[Value]) -> SList:
    return SList(args)


@register_stdlib("vector")
def std_vector(_frame: Frame, args: List[Value]) -> Vector:
    return Vector(args)


@register_stdlib("vec", arity=1)
def std_vec(_frame: Frame, args: List[Value]) -> Vector:
    return Vector(_as_seq("vec", args[0]))


@register_stdlib("hash-map")
def std_hash_map(_frame: Frame, args: List[Value]) -> Map:
    if len(args) % 2 != 0:
        raise EvalError("hash-map expects an even number of arguments")
    return Map(zip(args[0::2], args[1::2]))


@register_stdlib("hash-set")
def std_hash_set(_frame: Frame, args: List[Value]) -> SSet:
    return SSet(args)


@register_stdlib("set", arity=1)
def std_set(_frame: Frame, args: List[Value]) -> SSet:
    return SSet(_as_seq("set", args[0]))


@register_stdlib("range")
def std_range(_frame: Frame, args: List[Value]) -> SList:
    if not args:
        raise EvalError("(range) without an end is infinite; sequences are eager")
    _expect_range("range", args, 1, 3)
    bounds = [_expect_number("range", a) for a in args]

    if len(bounds) == 1:
        start, end, step = 0, bounds[0], 1
    elif len(bounds) == 2:
        start, end, step = bounds[0], bounds[1], 1
    else:
        start, end, step = bounds

    if step == 0:
        raise EvalError("range step must not be zero")

    items: List[Value] = []
    cur = start
    while (step > 0 and cur < end) or (step < 0 and cur > end):
        items.append(cur)
        cur += step

    return SList(items)


@register_stdlib("seq", arity=1)
def std_seq(_frame: Frame, args: List[Value]) -> Value:
    items = _as_seq("seq", args[0])
    return SList(items) if items else None


@register_stdlib("first", arity=1)
def std_first(_frame: Frame, args: List[Value]) -> Value:
    items = _as_seq("first", args[0])
    return items[0] if items else None


@register_stdlib("second", arity=1)
def std_second(_frame: Frame, args: List[Value]) -> Value:
    items = _as_seq("second", args[0])
    return items[1] if len(items) > 1 else None


@register_stdlib("last", arity=1)
def std_last(_frame: Frame, args: List[Value]) -> Value:
    items = _as_seq("last", args[0])
    return items[-1] if items else None


@register_stdlib("rest", arity=1)
def std_rest(_frame: Frame, args: List[Value]) -> SList:
    return SList(_as_seq("rest", args[0])[1:])


@register_stdlib("next", arity=1)
def std_next(_frame: Frame, args: List[Value]) -> Value:
    items = _as_seq("next", args[0])[1:]
    return SList(items) if items else None


@register_stdlib("cons", arity=2)
def std_cons(_frame: Frame, args: List[Value]) -> SList:
    return SList([args[0], *_as_seq("cons", args[1])])


@register_stdlib("conj")
def std_conj(_frame: Frame, args: List[Value]) -> Value:
    _expect_min("conj", args, 1)
    coll, *items = args

    match coll:
        case None:
            return SList(reversed(items))
        case Vector():
            return Vector([*coll, *items])
        case SList():
            return SList([*reversed(items), *coll])
        case dict():
            merged = Map(coll)
            for item in items:
                if isinstance(item, dict):
                    merged.update(item)
                else:
                    key, val = _as_seq("conj", item)
                    merged[key] = val
            return merged
        case SSet() | frozenset():
            return SSet([*coll, *items])
        case _:
            raise ShadowTypeError(f"Cannot conj onto {type_name(coll)}")


@register_stdlib("into", arity=2)
def std_into(frame: Frame, args: List[Value]) -> Value:
    coll, source = args
    return std_conj(frame, [coll, *_as_seq("into", source)])


@register_stdlib("concat")
def std_concat(_frame: Frame, args: List[Value]) -> SList:
    items: List[Value] = []
    for arg in args:
        items.extend(_as_seq("concat", arg))
    return SList(items)


@register_stdlib("count", arity=1)
def std_count(_frame: Frame, args: List[Value]) -> int:
    return len(_as_seq("count", args[0]))


@register_stdlib("empty?", arity=1)
def std_empty(_frame: Frame, args: List[Value]) -> bool:
    return not _as_seq("empty?", args[0])


@register_stdlib("nth")
def std_nth(_frame: Frame, args: List[Value]) -> Value:
    _expect_range("nth", args, 2, 3)
    items = _as_seq("nth", args[0])
    idx = _count_arg("nth", args[1])

    if 0 <= idx < len(items):
        return items[idx]
    if len(args) == 3:
        return args[2]
    raise EvalError(f"Index out of bounds: {idx}")


@register_stdlib("take", arity=2)
def std_take(_frame: Frame, args: List[Value]) -> SList:
    return SList(_as_seq("take", args[1])[:max(0, _count_arg("take", args[0]))])


@register_stdlib("drop", arity=2)
def std_drop(_frame: Frame, args: List[Value]) -> SList:
    return SList(_as_seq("drop", args[1])[max(0, _count_arg("drop", args[0])):])


@register_stdlib("reverse", arity=1)
def std_reverse(_frame: Frame, args: List[Value]) -> SList:
    return SList(reversed(_as_seq("reverse", args[0])))


@register_stdlib("map")
def std_map(frame: Frame, args: List[Value]) -> SList:
    _expect_min("map", args, 2)
    fn, *colls = args
    seqs = [_as_seq("map", c) for c in colls]
    return SList(call_value(fn, list(items), frame) for items in zip(*seqs))


@register_stdlib("mapv")
def std_mapv(frame: Frame, args: List[Value]) -> Vector:
    return Vector(std_map(frame, args))


@register_stdlib("map-indexed", arity=2)
def std_map_indexed(frame: Frame, args: List[Value]) -> SList:
    fn, coll = args
    return SList(call_value(fn, [i, item], frame) for i, item in enumerate(_as_seq("map-indexed", coll)))


@register_stdlib("filter", arity=2)
def std_filter(frame: Frame, args: List[Value]) -> SList:
    pred, coll = args
    return SList(item for item in _as_seq("filter", coll) if is_truthy(call_value(pred, [item], frame)))


@register_stdlib("remove", arity=2)
def std_remove(frame: Frame, args: List[Value]) -> SList:
    pred, coll = args
    return SList(item for item in _as_seq("remove", coll) if not is_truthy(call_value(pred, [item], frame)))


@register_stdlib("reduce")
def std_reduce(frame: Frame, args: List[Value]) -> Value:
    _expect_range("reduce", args, 2, 3)

    if len(args) == 2:
        fn, coll = args
        items = _as_seq("reduce", coll)
        if not items:
            return call_value(fn, [], frame)
        acc, items = items[0], items[1:]
    else:
        fn, acc, coll = args
        items = _as_seq("reduce", coll)

    for item in items:
        acc = call_value(fn, [acc, item], frame)

    return acc


@register_stdlib("partition")
def std_partition(_frame: Frame, args: List[Value]) -> SList:
    _expect_range("partition", args, 2, 3)
    size = _count_arg("partition", args[0])
    step = _count_arg("partition", args[1]) if len(args) == 3 else size
    items = _as_seq("partition", args[-1])

    if size <= 0 or step <= 0:
        raise EvalError("partition expects positive size and step")

    chunks = []
    for start in range(0, len(items), step):
        chunk = items[start:start + size]
        if len(chunk) < size:
            break
        chunks.append(SList(chunk))

    return SList(chunks)


@register_stdlib("partition-all", arity=2)
def std_partition_all(_frame: Frame, args: List[Value]) -> SList:
    size = _count_arg("partition-all", args[0])
    items = _as_seq("partition-all", args[1])

    if size <= 0:
        raise EvalError("partition-all expects a positive size")

    return SList(SList(items[i:i + size]) for i in range(0, len(items), size))


@register_stdlib("interleave")
def std_interleave(_frame: Frame, args: List[Value]) -> SList:
    seqs = [_as_seq("interleave", a) for a in args]
    return SList(item for group in zip(*seqs) for item in group)


@register_stdlib("sort")
def std_sort(frame: Frame, args: List[Value]) -> SList:
    _expect_range("sort", args, 1, 2)

    if len(args) == 1:
        return SList(sorted(_as_seq("sort", args[0])))

    cmp, coll = args
    key = functools.cmp_to_key(lambda a, b: _comparator_result(call_value(cmp, [a, b], frame)))
    return SList(sorted(_as_seq("sort", coll), key=key))


def _comparator_result(value: Value) -> int:
    if isinstance(value, bool):
        return -1 if value else 1
    return int(value)


@register_stdlib("sort-by", arity=2)
def std_sort_by(frame: Frame, args: List[Value]) -> SList:
    keyfn, coll = args
    return SList(sorted(_as_seq("sort-by", coll), key=lambda item: call_value(keyfn, [item], frame)))


@register_stdlib("frequencies", arity=1)
def std_frequencies(_frame: Frame, args: List[Value]) -> Map:
    counts = Map()
    for item in _as_seq("frequencies", args[0]):
        counts[item] = counts.get(item, 0) + 1
    return counts


@register_stdlib("apply")
def std_apply(frame: Frame, args: List[Value]) -> Value:
    _expect_min("apply", args, 2)
    fn, *middle, last = args
    return call_value(fn, [*middle, *_as_seq("apply", last)], frame)


@register_stdlib("identity", arity=1)
def std_identity(_frame: Frame, args: List[Value]) -> Value:
    return args[0]


@register_stdlib("comp")
def std_comp(frame: Frame, args: List[Value]) -> Builtin:
    fns = list(reversed(args))

    def composed(inner_frame: Frame, call_args: List[Value]) -> Value:
        if not fns:
            return call_args[0] if call_args else None
        result = call_value(fns[0], call_args, inner_frame)
        for fn in fns[1:]:
            result = call_value(fn, [result], inner_frame)
        return result

    return Builtin(name="comp", fn=composed)


@register_stdlib("partial")
def std_partial(frame: Frame, args: List[Value]) -> Builtin:
    _expect_min("partial", args, 1)
    fn, *bound = args

    def partial_fn(inner_frame: Frame, call_args: List[Value]) -> Value:
        return call_value(fn, [*bound, *call_args], inner_frame)

    return Builtin(name="partial", fn=partial_fn)

# ---------- maps ----------

@register_stdlib("get")
def std_get(_frame: Frame, args: List[Value]) -> Value:
    _expect_range("get", args, 2, 3)
    coll, key = args[0], args[1]
    default = args[2] if len(args) == 3 else None

    match coll:
        case dict():
            return coll.get(key, default)
        case Vector() | str():
            if isinstance(key, int) and not isinstance(key, bool) and 0 <= key < len(coll):
                return coll[key]
            return default
        case SSet() | frozenset():
            return key if key in coll else default
        case _:
            return default


@register_stdlib("get-in")
def std_get_in(frame: Frame, args: List[Value]) -> Value:
    _expect_range("get-in", args, 2, 3)
    cur = args[0]
    missing = object()

    for key in _as_seq("get-in", args[1]):
        cur = std_get(frame, [cur, key, missing])
        if cur is missing:
            return args[2] if len(args) == 3 else None

    return cur


@register_stdlib("assoc")
def std_assoc(_frame: Frame, args: List[Value]) -> Value:
    _expect_min("assoc", args, 3)
    coll, *kvs = args
    if len(kvs) % 2 != 0:
        raise EvalError("assoc expects even number of arguments after map/vector")

    if isinstance(coll, Vector):
        items = list(coll)
        for idx, val in zip(kvs[0::2], kvs[1::2]):
            idx = _count_arg("assoc", idx)
            if idx == len(items):
                items.append(val)
            elif 0 <= idx < len(items):
                items[idx] = val
            else:
                raise EvalError(f"Index out of bounds: {idx}")
        return Vector(items)

    if coll is not None and not isinstance(coll, dict):
        raise ShadowTypeError(f"Cannot assoc on {type_name(coll)}")

    result = Map(coll or {})
    result.update(zip(kvs[0::2], kvs[1::2]))
    return result


@register_stdlib("dissoc")
def std_dissoc(_frame: Frame, args: List[Value]) -> Value:
    _expect_min("dissoc", args, 1)
    coll, *keys = args
    if coll is None:
        return None
    result = Map(coll)
    for key in keys:
        result.pop(key, None)
    return result


@register_stdlib("keys", arity=1)
def std_keys(_frame: Frame, args: List[Value]) -> Value:
    return SList(args[0].keys()) if args[0] else None


@register_stdlib("vals", arity=1)
def std_vals(_frame: Frame, args: List[Value]) -> Value:
    return SList(args[0].values()) if args[0] else None


@register_stdlib("contains?", arity=2)
def std_contains(_frame: Frame, args: List[Value]) -> bool:
    coll, key = args
    match coll:
        case dict() | SSet() | frozenset():
            return key in coll
        case Vector() | str():
            return isinstance(key, int) and not isinstance(key, bool) and 0 <= key < len(coll)
        case None:
            return False
        case _:
            raise ShadowTypeError(f"contains? not supported on {type_name(coll)}")


@register_stdlib("merge")
def std_merge(_frame: Frame, args: List[Value]) -> Value:
    maps = [m for m in args if m is not None]
    if not maps:
        return None
    result = Map()
    for m in maps:
        result.update(m)
    return result


@register_stdlib("select-keys", arity=2)
def std_select_keys(_frame: Frame, args: List[Value]) -> Map:
    coll, keys = args
    coll = coll or {}
    return Map((k, coll[k]) for k in _as_seq("select-keys", keys) if k in coll)


@register_stdlib("update")
def std_update(frame: Frame, args: List[Value]) -> Value:
    _expect_min("update", args, 3)
    coll, key, fn, *extra = args
    current = std_get(frame, [coll, key])
    return std_assoc(frame, [coll, key, call_value(fn, [current, *extra], frame)])


@register_stdlib("zipmap", arity=2)
def std_zipmap(_frame: Frame, args: List[Value]) -> Map:
    return Map(zip(_as_seq("zipmap", args[0]), _as_seq("zipmap", args[1])))

# ---------- strings & symbols ----------

@register_stdlib("str")
def std_str(_frame: Frame, args: List[Value]) -> str:
    return "".join(to_str(arg) for arg in args)


@register_stdlib("pr-str")
def std_pr_str(_frame: Frame, args: List[Value]) -> str:
    return " ".join(pr_str(arg) for arg in args)


@register_stdlib("subs")
def std_subs(_frame: Frame, args: List[Value]) -> str:
    _expect_range("subs", args, 2, 3)
    text = args[0]
    if not isinstance(text, str):
        raise ShadowTypeError("subs expects a string")
    start = _count_arg("subs", args[1])
    end = _count_arg("subs", args[2]) if len(args) == 3 else len(text)
    if not 0 <= start <= end <= len(text):
        raise EvalError(f"String index out of range: {start}..{end}")
    return text[start:end]


@register_stdlib("name", arity=1)
def std_name(_frame: Frame, args: List[Value]) -> str:
    value = args[0]
    match value:
        case str():
            return value
        case Symbol():
            return value.short
        case Keyword():
            return value.name
        case _:
            raise ShadowTypeError(f"Doesn't support name: {type_name(value)}")


@register_stdlib("keyword", arity=1)
def std_keyword(_frame: Frame, args: List[Value]) -> Keyword:
    value = args[0]
    if isinstance(value, Keyword):
        return value
    return Keyword(value.name if isinstance(value, Symbol) else str(value))


@register_stdlib("symbol", arity=1)
def std_symbol(_frame: Frame, args: List[Value]) -> Symbol:
    value = args[0]
    if isinstance(value, Symbol):
        return value
    return Symbol(value.name if isinstance(value, Keyword) else str(value))


@register_stdlib("println")
def std_println(_frame: Frame, args: List[Value]) -> None:
    print(" ".join(to_str(arg) for arg in args), file=sys.stdout)
    return None


@register_stdlib("prn")
def std_prn(_frame: Frame, args: List[Value]) -> None:
    print(" ".join(pr_str(arg) for arg in args), file=sys.stdout)
    return None

# ---------- atoms ----------

@register_stdlib("atom", arity=1)
def std_atom(_frame: Frame, args: List[Value]) -> Atom:
    return Atom(args[0])


def _expect_atom(name: str, value: Value) -> Atom:
    if not isinstance(value, Atom):
        raise ShadowTypeError(f"{name} expects an atom; got {type_name(value)}")
    return value


@register_stdlib("deref", arity=1)
def std_deref(_frame: Frame, args: List[Value]) -> Value:
    value = args[0]
    if isinstance(value, Var):
        raise EvalError("deref of a var is not supported; use the symbol directly")
    return _expect_atom("deref", value).value


@register_stdlib("reset!", arity=2)
def std_reset(_frame: Frame, args: List[Value]) -> Value:
    atom = _expect_atom("reset!", args[0])
    atom.value = args[1]
    return atom.value


@register_stdlib("swap!")
def std_swap(frame: Frame, args: List[Value]) -> Value:
    _expect_min("swap!", args, 2)
    atom = _expect_atom("swap!", args[0])
    atom.value = call_value(args[1], [atom.value, *args[2:]], frame)
    return atom.value

# ---------- errors ----------

@register_stdlib("ex-info")
def std_ex_info(_frame: Frame, args: List[Value]) -> ExInfo:
    _expect_range("ex-info", args, 2, 3)
    message, data = args[0], args[1]
    if not isinstance(message, str):
        raise ShadowTypeError("ex-info expects a string message")
    if data is not None and not isinstance(data, dict):
        raise ShadowTypeError("ex-info expects a map of data")
    cause = args[2] if len(args) == 3 and isinstance(args[2], ShadowRuntimeError) else None
    return ExInfo(message, Map(data or {}), cause)


@register_stdlib("ex-message", arity=1)
def std_ex_message(_frame: Frame, args: List[Value]) -> Value:
    value = args[0]
    if isinstance(value, ShadowRuntimeError):
        return value.message
    return None


@register_stdlib("ex-data", arity=1)
def std_ex_data(_frame: Frame, args: List[Value]) -> Value:
    value = args[0]
    if isinstance(value, ExInfo):
        return value.data
    if isinstance(value, ThrownError):
        return None
    return None

# ---------- metadata ----------

@register_stdlib("meta", arity=1)
def std_meta(frame: Frame, args: List[Value]) -> Value:
    value = args[0]
    if isinstance(value, Var):
        return frame.root().var_meta(value)
    meta = getattr(value, "meta", None)
    return Map(meta) if meta else None

# ---------- shadows ----------

@register_stdlib("shadow-get", arity=1)
def std_shadow_get(frame: Frame, args: List[Value]) -> Value:
    return frame.root().shadow_get(_shadow_name(args[0]))


@register_stdlib("shadow-put!", arity=2)
def std_shadow_put(frame: Frame, args: List[Value]) -> Value:
    frame.root().shadow_put(_shadow_name(args[0]), args[1])
    return args[1]


@register_stdlib("shadow-map", arity=0)
def std_shadow_map(frame: Frame, args: List[Value]) -> Map:
    return Map((Symbol(name), value) for name, value in frame.root().shadow_snapshot().items())


@register_stdlib("shadow-clear!", arity=0)
def std_shadow_clear(frame: Frame, args: List[Value]) -> int:
    return frame.root().shadow_clear()


def _shadow_name(value: Value) -> str:
    match value:
        case Symbol():
            return value.name
        case str():
            return value
        case Keyword():
            return value.name
        case _:
            raise ShadowTypeError(f"Shadow names must be symbols; got {type_name(value)}")
