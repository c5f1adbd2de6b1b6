# -*- coding: utf-8 -*-
"""
실행 지원 라이브러리
- RuntimeSupport: 생성된 코드가 `_o` 로 받는 객체 (print / cls / dimArray)
- JS 값 규칙 헬퍼: 숫자 -> 문자열, + 연결, Number(), ToInt32, Math.round, 참/거짓
- FUNCTIONS: BASIC 내장 함수 (JS 출력과 같은 동작)
"""

import math
import random
import re
import time
from decimal import Decimal

from basic_grammar import BasicError

NAN = float("nan")


class BasicRuntimeError(BasicError):
    """실행 중 오류 (0으로 나누기, DATA 부족 등)"""


# =====================================================
# JS 값 규칙
# =====================================================
def js_str(v) -> str:
    if isinstance(v, str):
        return v
    if v is None:
        return "undefined"
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, list):
        return ",".join("" if x is None else js_str(x) for x in v)
    if isinstance(v, int):
        return str(v)
    if isinstance(v, float):
        if math.isnan(v):
            return "NaN"
        if math.isinf(v):
            return "Infinity" if v > 0 else "-Infinity"
        if v == int(v) and abs(v) < 1e21:
            return str(int(v))
        s = repr(v)
        if "e" in s:
            mant, exp = s.split("e")
            e = int(exp)
            if -7 < e < 0:
                # JS 는 1e-6 이상이면 소수점 표기
                return format(Decimal(s), "f")
            return f"{mant}e{'+' if e > 0 else '-'}{abs(e)}"
        return s
    return str(v)


def is_number(v):
    return isinstance(v, (int, float)) and not isinstance(v, bool)


_DEC_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)(e[+-]?\d+)?$", re.I)


def js_number(v):
    """Number(v)"""
    if is_number(v):
        return v
    if v is None:
        return NAN
    if isinstance(v, bool):
        return int(v)
    if isinstance(v, str):
        s = v.strip()
        if s == "":
            return 0
        low = s.lower()
        try:
            if low.startswith("0x"):
                return int(s[2:], 16)
            if low.startswith("0b"):
                return int(s[2:], 2)
            if low.startswith("0o"):
                return int(s[2:], 8)
        except ValueError:
            return NAN
        if s in ("Infinity", "+Infinity"):
            return math.inf
        if s == "-Infinity":
            return -math.inf
        if _DEC_NUMBER.match(s):
            if any(c in s for c in ".eE"):
                return float(s)
            return int(s)
        return NAN
    if isinstance(v, list):
        if not v:
            return 0
        if len(v) == 1:
            return js_number(js_str(v))
    return NAN


def js_add(a, b):
    if isinstance(a, (str, list)) or isinstance(b, (str, list)):
        return js_str(a) + js_str(b)
    return js_number(a) + js_number(b)


def to_int32(v) -> int:
    n = js_number(v)
    if isinstance(n, float):
        if math.isnan(n) or math.isinf(n):
            return 0
        n = math.trunc(n)
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n >= 0x80000000 else n


def to_integer(v):
    """ToIntegerOrInfinity"""
    n = js_number(v)
    if isinstance(n, float):
        if math.isnan(n):
            return 0
        if math.isinf(n):
            return n
        return math.trunc(n)
    return n


def js_round(v):
    """Math.round: .5 는 +방향 (ROUND(2.5)=3, ROUND(-2.5)=-2)"""
    n = js_number(v)
    if isinstance(n, int):
        return n
    if math.isnan(n) or math.isinf(n):
        return n
    return math.floor(n + 0.5)


def js_truthy(v) -> bool:
    if v is None:
        return False
    if isinstance(v, str):
        return v != ""
    if isinstance(v, list):
        return True
    if isinstance(v, float) and math.isnan(v):
        return False
    return v != 0


def js_equal(a, b) -> bool:
    """=== """
    if is_number(a) and is_number(b):
        return a == b     # NaN != NaN
    if type(a) is not type(b):
        return False
    if isinstance(a, list):
        return a is b
    return a == b


def js_less(a, b):
    """a < b (NaN 이 끼면 None)"""
    if isinstance(a, str) and isinstance(b, str):
        return a < b
    x, y = js_number(a), js_number(b)
    if isinstance(x, float) and math.isnan(x) or isinstance(y, float) and math.isnan(y):
        return None
    return x < y


def js_compare(op, a, b) -> bool:
    if op == '=':
        return js_equal(a, b)
    if op == '<>':
        return not js_equal(a, b)
    if op == '<':
        return js_less(a, b) is True
    if op == '>':
        return js_less(b, a) is True
    if op == '<=':
        r = js_less(b, a)
        return r is False
    if op == '>=':
        r = js_less(a, b)
        return r is False
    raise ValueError(f"unknown comparison: {op}")


def js_mod(a, b):
    x, y = js_number(a), js_number(b)
    if y == 0:
        raise ZeroDivisionError("modulo by zero")
    if isinstance(x, int) and isinstance(y, int):
        r = abs(x) % abs(y)
        return -r if x < 0 else r
    return math.fmod(x, y)


def js_div(a, b):
    x, y = js_number(a), js_number(b)
    if y == 0:
        raise ZeroDivisionError("division by zero")
    return x / y


def _need_str(v, method):
    if not isinstance(v, str):
        raise TypeError(f"({js_str(v)}).{method} is not a function")
    return v


def js_slice(s, start, end=None):
    n = len(s)

    def clamp(i):
        i = to_integer(i)
        if i < 0:
            return max(n + i, 0)
        return min(i, n)

    a = clamp(start)
    b = n if end is None else clamp(end)
    return s[int(a):int(b)] if b > a else ""


def js_substr(s, start, length=None):
    n = len(s)
    a = to_integer(start)
    if a < 0:
        a = max(n + a, 0)
    a = min(a, n)
    ln = n if length is None else to_integer(length)
    b = min(a + max(ln, 0), n)
    return s[int(a):int(b)] if b > a else ""


def _to_radix(v, radix):
    if isinstance(v, str):
        return v
    n = js_number(v)
    if isinstance(n, float):
        if math.isnan(n):
            return "NaN"
        if math.isinf(n):
            return "Infinity" if n > 0 else "-Infinity"
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    neg = n < 0
    n = abs(n)
    ip = int(n)
    frac = n - ip
    out = ""
    while True:
        out = digits[ip % radix] + out
        ip //= radix
        if ip == 0:
            break
    if frac:
        out += "."
        for _ in range(52):
            frac *= radix
            d = int(frac)
            out += digits[d]
            frac -= d
            if not frac:
                break
    return ("-" if neg else "") + out


def _pad(s, width):
    # padStart(width || 0, "0")
    w = to_integer(width) if js_truthy(width) else 0
    if w <= len(s):
        return s
    return "0" * int(w - len(s)) + s


def _repeat(s, count):
    n = to_integer(count)
    if n < 0 or math.isinf(n):
        raise ValueError(f"Invalid count value: {js_str(count)}")
    return s * int(n)


def _sign(v):
    n = js_number(v)
    if isinstance(n, float) and math.isnan(n):
        return n
    return (n > 0) - (n < 0)


def _math(fn):
    def call(x):
        n = js_number(x)
        return fn(n)
    return call


def _trunc_like(fn):
    def call(x):
        n = js_number(x)
        if isinstance(n, float) and (math.isnan(n) or math.isinf(n)):
            return n
        return fn(n)
    return call


def _round_to(x, n=None):
    if n is None:
        return js_round(x)
    scale = math.pow(10, js_number(n))
    return js_round(js_number(x) * scale) / scale


def _val(v):
    if isinstance(v, str):
        return js_number(v.replace("&x", "0b", 1).replace("&", "0x", 1))
    return js_number(v)


def _minmax(fn):
    def call(*args):
        nums = [js_number(a) for a in args]
        if any(isinstance(n, float) and math.isnan(n) for n in nums):
            return NAN
        return fn(nums)
    return call


def _asc(s):
    s = _need_str(s, "charCodeAt")
    return ord(s[0]) if s else NAN


def _radix_fn(radix):
    def call(n, pad=None):
        text = _to_radix(n, radix).upper()
        return text if pad is None else _pad(text, pad)
    return call


def _length(v):
    if isinstance(v, (str, list)):
        return len(v)
    return None


# 내장 함수 (BASIC 이름 -> 구현)
FUNCTIONS = {
    'ABS': _math(abs),
    'ATN': _math(math.atan),
    'COS': _math(math.cos),
    'EXP': _math(math.exp),
    'LOG': _math(math.log),
    'LOG10': _math(math.log10),
    'SIN': _math(math.sin),
    'SQR': _math(math.sqrt),
    'TAN': _math(math.tan),
    'SGN': _sign,
    'FIX': _trunc_like(math.trunc),
    'INT': _trunc_like(math.floor),
    'CINT': js_round,
    'ROUND': _round_to,
    'ASC': _asc,
    'BIN$': _radix_fn(2),
    'HEX$': _radix_fn(16),
    'CHR$': lambda n: chr(to_int32(n) & 0xFFFF),
    'LEFT$': lambda s, n: js_slice(_need_str(s, "slice"), 0, n),
    'RIGHT$': lambda s, n: js_slice(_need_str(s, "slice"), -js_number(n)),
    'MID$': lambda s, p, n=None: js_substr(_need_str(s, "substr"), js_number(p) - 1, n),
    'LEN': _length,
    'LOWER$': lambda s: _need_str(s, "toLowerCase").lower(),
    'UPPER$': lambda s: _need_str(s, "toUpperCase").upper(),
    'MAX': _minmax(max),
    'MIN': _minmax(min),
    'PI': lambda: math.pi,
    'RND': lambda *args: random.random(),
    'TIME': lambda: int(time.time() * 1000),
    'SPACE$': lambda n: _repeat(" ", n),
    'STR$': js_str,
    'STRING$': lambda n, s: _repeat(_need_str(s, "repeat"), n),
    'VAL': _val,
}


# =====================================================
# 실행 지원 객체 (_o)
# =====================================================
class RuntimeSupport:
    def __init__(self):
        self._output = ""
        self._on_cls = lambda: None

    def dim_array(self, dims, init_value=0):
        """축마다 (상한 + 1) 크기의 중첩 리스트. 재귀 없이 만든다."""
        lengths = []
        for d in dims:
            n = js_number(d)
            if isinstance(n, float):
                if not n.is_integer():
                    raise ValueError("Invalid array length")
                n = int(n)
            if n + 1 < 0:
                raise ValueError("Invalid array length")
            lengths.append(n + 1)

        root = [None] * lengths[0]
        pending = [(root, 0)]
        last = len(lengths) - 1
        while pending:
            arr, depth = pending.pop()
            if depth == last:
                arr[:] = [init_value] * len(arr)
                continue
            for i in range(len(arr)):
                child = [None] * lengths[depth + 1]
                arr[i] = child
                pending.append((child, depth + 1))
        return root

    def print(self, *args):
        self._output += "".join(js_str(a) for a in args)

    def cls(self):
        self._output = ""
        self._on_cls()

    def get_output(self):
        return self._output

    def set_output(self, text):
        self._output = text

    def set_on_cls(self, fn):
        self._on_cls = fn
