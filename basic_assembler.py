# -*- coding: utf-8 -*-
"""
프로그램 조립 (2nd pass)
- DATA/RESTORE 마무리, GOSUB 서브루틴 구역 결정
- [Line | Region] IR 을 만든 다음 JavaScript 텍스트로 출력
"""

import json
import logging
import re
from typing import List, Optional

from basic_context import CompileContext
from basic_transformer import Line, Stmt

log = logging.getLogger(__name__)


class Region:
    """GOSUB 대상 구역 -> function _<label>() { ... }"""
    __slots__ = ("label", "lines")

    def __init__(self, label, lines):
        self.label = label
        self.lines: List[Line] = lines

    def __repr__(self):
        return f"Region({self.label!r}, {len(self.lines)} lines)"


class CompiledProgram:
    def __init__(self, text, items=None, declarations=None, data_list=None, restore_map=None):
        self.text: str = text
        self.items = items                     # [Line | Region, ...], 오류면 None
        self.declarations = declarations or []
        self.data_list = data_list or []
        self.restore_map = restore_map or {}

    @property
    def ok(self):
        return self.items is not None

    def __str__(self):
        return self.text


# -----------------------------
# 구역 결정
# -----------------------------
def build_regions(lines: List[Line], ctx: CompileContext):
    ctx.data.finish(ctx.labels)
    regions = ctx.labels.resolve_subroutines()
    log.debug("subroutine regions: %s", regions)

    starts = {first: (label, last) for label, first, last in regions}
    items = []
    i = 0
    while i < len(lines):
        if i in starts:
            label, last = starts[i]
            items.append(Region(label, lines[i:last+1]))
            i = last + 1
        else:
            items.append(lines[i])
            i += 1
    return items


# =====================================================
# JavaScript 출력
# =====================================================
# 값이 클수록 강하게 묶임
P_TERNARY = 1
P_BOR = 2
P_BXOR = 3
P_BAND = 4
P_EQ = 5
P_REL = 6
P_ADD = 7
P_MUL = 8
P_UNARY = 9
P_PRIMARY = 10

_BIN_JS = {
    '+': ('+', P_ADD), '-': ('-', P_ADD),
    '*': ('*', P_MUL), '/': ('/', P_MUL), 'MOD': ('%', P_MUL),
    'AND': ('&', P_BAND), 'OR': ('|', P_BOR), 'XOR': ('^', P_BXOR),
}
_CMP_JS = {
    '=': ('===', P_EQ), '<>': ('!==', P_EQ),
    '<': ('<', P_REL), '<=': ('<=', P_REL), '>': ('>', P_REL), '>=': ('>=', P_REL),
}
_MATH1 = {
    'ABS': 'Math.abs', 'ATN': 'Math.atan', 'COS': 'Math.cos', 'EXP': 'Math.exp',
    'LOG': 'Math.log', 'LOG10': 'Math.log10', 'SIN': 'Math.sin', 'SQR': 'Math.sqrt',
    'TAN': 'Math.tan', 'SGN': 'Math.sign', 'FIX': 'Math.trunc', 'INT': 'Math.floor',
    'CINT': 'Math.round',
}
_NUM_STRING = re.compile(r'^"[+\-]?\d*\.?\d+(?:[Ee][+\-]?\d+)?"$')


def _wrap(text, prec, min_prec):
    return f"({text})" if prec < min_prec else text


class JsRenderer:
    def expr(self, e, min_prec=0) -> str:
        text, prec = self._expr(e)
        return _wrap(text, prec, min_prec)

    def _expr(self, e):
        tag = e[0]
        if tag == 'NUM':
            return e[2], (P_UNARY if e[2].startswith('-') else P_PRIMARY)
        if tag == 'STR':
            return e[2], P_PRIMARY
        if tag == 'VAR':
            return e[1], P_PRIMARY
        if tag == 'ARR':
            return self.array_ref(e), P_PRIMARY
        if tag == 'PAREN':
            return f"({self.expr(e[1])})", P_PRIMARY
        if tag == 'UN':
            if e[1] == '+':
                return self._expr(e[2])
            inner = self.expr(e[2], P_UNARY)
            if inner.startswith('-'):
                inner = f"({inner})"
            return "-" + inner, P_UNARY
        if tag == 'NOT':
            return f"~({self.expr(e[1])})", P_UNARY
        if tag == 'CMP':
            op, prec = _CMP_JS[e[1]]
            a = self.expr(e[2], prec)
            b = self.expr(e[3], prec + 1)
            return f"{a} {op} {b} ? -1 : 0", P_TERNARY
        if tag == 'BIN':
            op = e[1]
            if op == '\\':
                return f"Math.trunc({self.expr(e[2], P_MUL)} / {self.expr(e[3], P_MUL + 1)})", P_PRIMARY
            if op == '^':
                return f"Math.pow({self.expr(e[2])}, {self.expr(e[3])})", P_PRIMARY
            js, prec = _BIN_JS[op]
            a = self.expr(e[2], prec)
            b = self.expr(e[3], prec + 1)
            return f"{a} {js} {b}", prec
        if tag == 'CALL':
            return self.call(e[1], e[2])
        raise ValueError(f"unknown expression node: {tag}")

    def array_ref(self, e):
        return e[1] + "".join(f"[{self.expr(i)}]" for i in e[2])

    def call(self, name, args):
        r = self.expr
        if name in _MATH1:
            return f"{_MATH1[name]}({r(args[0])})", P_PRIMARY
        if name == 'ASC':
            return f"({r(args[0])}).charCodeAt(0)", P_PRIMARY
        if name in ('BIN$', 'HEX$'):
            radix = 2 if name == 'BIN$' else 16
            text = f"({r(args[0])}).toString({radix}).toUpperCase()"
            if len(args) > 1:
                text += f".padStart({r(args[1], P_BOR)} || 0, \"0\")"
            return text, P_PRIMARY
        if name == 'CHR$':
            return f"String.fromCharCode({r(args[0])})", P_PRIMARY
        if name == 'LEFT$':
            return f"({r(args[0])}).slice(0, {r(args[1])})", P_PRIMARY
        if name == 'RIGHT$':
            n = r(args[1], P_UNARY)
            if n.startswith('-'):
                n = f"({n})"
            return f"({r(args[0])}).slice(-{n})", P_PRIMARY
        if name == 'LEN':
            return f"({r(args[0])}).length", P_PRIMARY
        if name == 'LOWER$':
            return f"({r(args[0])}).toLowerCase()", P_PRIMARY
        if name == 'UPPER$':
            return f"({r(args[0])}).toUpperCase()", P_PRIMARY
        if name in ('MAX', 'MIN'):
            return f"Math.{name.lower()}({', '.join(r(a) for a in args)})", P_PRIMARY
        if name == 'MID$':
            text = f"({r(args[0])}).substr({r(args[1], P_ADD)} - 1"
            if len(args) > 2:
                text += f", {r(args[2])}"
            return text + ")", P_PRIMARY
        if name == 'PI':
            return "Math.PI", P_PRIMARY
        if name == 'RND':
            return "Math.random()", P_PRIMARY
        if name == 'TIME':
            return "Date.now()", P_PRIMARY
        if name == 'ROUND':
            if len(args) > 1:
                n = r(args[1])
                return f"(Math.round({r(args[0], P_MUL)} * Math.pow(10, {n})) / Math.pow(10, {n}))", P_PRIMARY
            return f"Math.round({r(args[0])})", P_PRIMARY
        if name == 'SPACE$':
            return f"\" \".repeat({r(args[0])})", P_PRIMARY
        if name == 'STR$':
            return f"String({r(args[0])})", P_PRIMARY
        if name == 'STRING$':
            return f"({r(args[1])}).repeat({r(args[0])})", P_PRIMARY
        if name == 'VAL':
            s = r(args[0])
            if _NUM_STRING.match(s):
                return f"Number({s})", P_PRIMARY
            return f"Number(({s}).replace(\"&x\", \"0b\").replace(\"&\", \"0x\"))", P_PRIMARY
        raise ValueError(f"unknown function: {name}")

    # -----------------------------
    # 문장
    # -----------------------------
    def stmt(self, st: Stmt) -> str:
        tag = st[0]
        r = self.expr
        if tag == 'ASSIGN':
            return f"{r(st[1])} = {r(st[2])}"
        if tag == 'PRINT':
            args, newline = st[1], st[2]
            parts = [r(a) for a in args]
            if newline:
                if parts:
                    parts[-1] = r(args[-1], P_ADD) + ' + "\\n"'
                else:
                    parts = ['"\\n"']
            return f"_o.print({', '.join(parts)})"
        if tag == 'CLS':
            return "_o.cls()"
        if tag == 'DIM':
            out = []
            for _, name, dims in st[1]:
                init = ', ""' if name.endswith('$') else ''
                out.append(f"{name} = _o.dimArray([{','.join(r(d) for d in dims)}]{init})")
            return "; ".join(out)
        if tag == 'DATA':
            return ""
        if tag == 'READ':
            return "; ".join(f"{r(t)} = _data[_dataPtr++]" for t in st[1])
        if tag == 'RESTORE':
            return f"_dataPtr = _restoreMap[{st[1]}]"
        if tag == 'FOR':
            return self.for_header(st)
        if tag == 'NEXT':
            return "}" * max(1, len(st[1]))
        if tag == 'WHILE':
            return f"while ({r(st[1])}) {{"
        if tag == 'WEND':
            return "}"
        if tag == 'IF':
            text = f"if ({r(st[1])}) {{\n{self.stmts(st[2])}\n}}"
            if st[3] is not None:
                text += f" else {{\n{self.stmts(st[3])}\n}}"
            return text
        if tag == 'GOSUB':
            return f"_{st[1]}()"
        if tag == 'ON_GOSUB':
            targets = ", ".join(f"_{l}" for l in st[2])
            return f"[{targets}][{r(st[1], P_ADD)} - 1]?.()"
        if tag == 'RETURN':
            return "return"
        if tag == 'END':
            return 'return "end"'
        if tag == 'STOP':
            return 'return "stop"'
        if tag == 'REM':
            return ("// " + st[1]).rstrip()
        if tag == 'COMMENT':
            return "//" + st[1]
        raise ValueError(f"unknown statement: {tag}")

    def for_header(self, st):
        _, var, start, end, step = st
        r = self.expr
        step_text = r(step) if step is not None else "1"
        end_text = r(end, P_REL + 1)
        sign = constant_step_sign(step)
        if sign is None:
            cond = f"{r(step, P_REL)} >= 0 ? {var} <= {end_text} : {var} >= {end_text}"
        elif sign >= 0:
            cond = f"{var} <= {end_text}"
        else:
            cond = f"{var} >= {end_text}"
        return f"for ({var} = {r(start)}; {cond}; {var} += {step_text}) {{"

    def stmts(self, stmts: List[Stmt]) -> str:
        comment = None
        if stmts and stmts[-1][0] == 'COMMENT':
            comment = stmts[-1][1]
            stmts = stmts[:-1]
        text = "; ".join(p for p in (self.stmt(s) for s in stmts) if p)
        if comment is not None:
            text = f"{text}; //{comment}" if text else f"//{comment}"
        return text

    def line(self, line: Line) -> str:
        text = self.stmts(line.stmts)
        if line.comment is not None:
            return f"{text}; //{line.comment}" if text else f"//{line.comment}"
        if text == "" or text.endswith("{") or text.startswith("//"):
            return text
        return text + ";"


def constant_step_sign(step) -> Optional[int]:
    # STEP 이 상수면 부호로 비교 방향을 고정
    if step is None:
        return 1
    if step[0] == 'NUM':
        return -1 if step[1] < 0 else 1
    if step[0] == 'UN' and step[2][0] == 'NUM':
        value = -step[2][1] if step[1] == '-' else step[2][1]
        return -1 if value < 0 else 1
    return None


def render_program(items, ctx: CompileContext) -> str:
    js = JsRenderer()
    out = []
    data = ctx.data
    if data.data_list:
        out.append("const _data = _getData();\nconst _restoreMap = _getRestore();\nlet _dataPtr = 0;")
    for item in items:
        if isinstance(item, Region):
            out.append(f"function _{item.label}() {{")
            out.extend("  " + js.line(l) for l in item.lines)
            out.append("}")
        else:
            out.append(js.line(item))
    if data.data_list:
        out.append("function _getData() {\nreturn [\n" + ",\n".join(data.data_text) + "\n];\n}")
        out.append("function _getRestore() {\nreturn " + json.dumps(data.restore_map, separators=(",", ":")) + ";\n}")

    decls = ctx.registry.declarations()
    head = ""
    if decls:
        head = "let " + ", ".join(f'{n} = ""' if isinstance(v, str) else f"{n} = {v}" for n, v in decls) + ";\n"
    return head + "\n".join(out)


def assemble(lines: List[Line], ctx: CompileContext) -> CompiledProgram:
    items = build_regions(lines, ctx)
    text = render_program(items, ctx)
    return CompiledProgram(text, items, ctx.registry.declarations(),
                           list(ctx.data.data_list), dict(ctx.data.restore_map))
