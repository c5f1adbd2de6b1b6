# -*- coding: utf-8 -*-
"""
IR 실행기 (생성된 JavaScript 와 같은 의미로 동작)
1) 블록 결합: FOR/WHILE/서브루틴 여는 쪽과 NEXT/WEND/끝 닫는 쪽을 '{' '}' 처럼 짝지음
2) 실행: 서브루틴은 먼저 등록(hoist), 본문은 위에서부터 실행
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from basic_assembler import Region, constant_step_sign
from basic_grammar import BasicError, BasicSyntaxError
from basic_runtime import (
    FUNCTIONS, BasicRuntimeError, RuntimeSupport,
    js_add, js_compare, js_div, js_mod, js_number, js_str, js_truthy, to_int32,
)

log = logging.getLogger(__name__)

Stmt = Tuple[Any, ...]
LineStmt = Tuple[int, Stmt]

OPENERS = {'FOR', 'WHILE', 'SUB_BEGIN'}
CLOSERS = {'NEXT', 'WEND', 'SUB_END'}


# -----------------------------
# 1) 블록 결합
# -----------------------------
def flatten(items) -> List[LineStmt]:
    out: List[LineStmt] = []
    for item in items:
        if isinstance(item, Region):
            first = item.lines[0].index if item.lines else 0
            last = item.lines[-1].index if item.lines else 0
            out.append((first, ('SUB_BEGIN', item.label)))
            for line in item.lines:
                out.extend((line.index, st) for st in line.stmts)
            out.append((last, ('SUB_END',)))
        else:
            out.extend((item.index, st) for st in item.stmts)
    return out


def _close_count(st):
    if st[0] == 'NEXT':
        return max(1, len(st[1]))
    return 1


def _make_block(opener: Stmt, body):
    tag = opener[0]
    if tag == 'FOR':
        _, var, start, end, step = opener
        return ('FOR_BLOCK', var, start, end, step, body)
    if tag == 'WHILE':
        return ('WHILE_BLOCK', opener[1], body)
    return ('SUB', opener[1], body)


def combine_blocks(prog: List[LineStmt]) -> List[LineStmt]:
    root: List[LineStmt] = []
    stack = [(None, root)]
    last_ln = 0
    for ln, st in prog:
        last_ln = ln
        tag = st[0]
        if tag in OPENERS:
            stack.append(((ln, st), []))
        elif tag in CLOSERS:
            for _ in range(_close_count(st)):
                if len(stack) == 1:
                    raise BasicSyntaxError("Unexpected token '}'", ln + 1)
                (oln, opener), body = stack.pop()
                stack[-1][1].append((oln, _make_block(opener, body)))
        elif tag == 'IF':
            then_body = combine_blocks([(ln, s) for s in st[2]])
            else_body = combine_blocks([(ln, s) for s in st[3]]) if st[3] is not None else []
            stack[-1][1].append((ln, ('IF_BLOCK', st[1], then_body, else_body)))
        elif tag in ('DATA', 'REM', 'COMMENT'):
            continue
        else:
            stack[-1][1].append((ln, st))
    if len(stack) > 1:
        raise BasicSyntaxError("Unexpected end of input", last_ln + 1)
    return root


# -----------------------------
# 2) 실행기
# -----------------------------
def _error_message(exc):
    if isinstance(exc, ZeroDivisionError):
        return "Division by zero"
    if isinstance(exc, OverflowError):
        return "Numerical result out of range"
    return str(exc)


class BasicInterpreter:
    def __init__(self, program, runtime: Optional[RuntimeSupport] = None):
        self.program = program
        self.rt = runtime or RuntimeSupport()
        self.vars: Dict[str, Any] = dict(program.declarations)
        self.subs: Dict[str, List[LineStmt]] = {}
        self.data: List[Any] = list(program.data_list)
        self.restore_map: Dict[str, int] = dict(program.restore_map)
        self.data_ptr = 0
        self.body = combine_blocks(flatten(program.items))
        # function 선언처럼 먼저 등록 (같은 이름이면 뒤의 것)
        for _, st in self.body:
            if st[0] == 'SUB':
                self.subs[st[1]] = st[2]

    def run(self):
        r = self._execute_block(self.body)
        return r[1] if r else None

    # ---------- 식 ----------
    def eval_expr(self, node):
        typ = node[0]
        if typ in ('NUM', 'STR'):
            return node[1]
        if typ == 'VAR':
            return self.vars[node[1]]
        if typ == 'ARR':
            v = self.vars[node[1]]
            for i in node[2]:
                v = self._index(v, self.eval_expr(i))
            return v
        if typ == 'PAREN':
            return self.eval_expr(node[1])
        if typ == 'UN':
            v = self.eval_expr(node[2])
            return -js_number(v) if node[1] == '-' else v
        if typ == 'NOT':
            return to_int32(~to_int32(self.eval_expr(node[1])))
        if typ == 'CMP':
            a, b = self.eval_expr(node[2]), self.eval_expr(node[3])
            return -1 if js_compare(node[1], a, b) else 0
        if typ == 'BIN':
            return self._binary(node[1], self.eval_expr(node[2]), self.eval_expr(node[3]))
        if typ == 'CALL':
            args = [self.eval_expr(a) for a in node[2]]
            return FUNCTIONS[node[1]](*args)
        raise BasicRuntimeError(f"unknown expression: {typ}")

    def _binary(self, op, a, b):
        if op == '+':
            return js_add(a, b)
        if op == '-':
            return js_number(a) - js_number(b)
        if op == '*':
            return js_number(a) * js_number(b)
        if op == '/':
            return js_div(a, b)
        if op == 'MOD':
            return js_mod(a, b)
        if op == '\\':
            q = js_div(a, b)
            if math.isnan(q) or math.isinf(q):
                return q
            return math.trunc(q)
        if op == '^':
            return math.pow(js_number(a), js_number(b))
        if op == 'AND':
            return to_int32(a) & to_int32(b)
        if op == 'OR':
            return to_int32(a) | to_int32(b)
        if op == 'XOR':
            return to_int32(a) ^ to_int32(b)
        raise BasicRuntimeError(f"unknown operator: {op}")

    @staticmethod
    def _index(container, key):
        if container is None:
            raise TypeError(f"Cannot read properties of undefined (reading '{js_str(key)}')")
        if isinstance(container, (list, str)):
            k = js_number(key)
            if isinstance(k, float):
                if not k.is_integer():
                    return None
                k = int(k)
            if 0 <= k < len(container):
                return container[k]
        return None

    def _assign(self, target, value):
        if target[0] == 'VAR':
            self.vars[target[1]] = value
            return
        _, name, idx_nodes = target
        keys = [self.eval_expr(i) for i in idx_nodes]
        container = self.vars[name]
        for k in keys[:-1]:
            container = self._index(container, k)
        if container is None:
            raise TypeError(f"Cannot set properties of undefined (setting '{js_str(keys[-1])}')")
        if not isinstance(container, list):
            return  # 원시값에 대한 대입은 무시됨
        k = js_number(keys[-1])
        if isinstance(k, float):
            if not k.is_integer():
                raise IndexError(f"invalid array index: {js_str(keys[-1])}")
            k = int(k)
        if k < 0:
            raise IndexError(f"invalid array index: {k}")
        if k >= len(container):
            container.extend([None] * (k + 1 - len(container)))
        container[k] = value

    # ---------- 문장 ----------
    def _execute_block(self, body: List[LineStmt]):
        for ln, st in body:
            try:
                r = self.exec_stmt(ln, st)
            except BasicError:
                raise
            except RecursionError as exc:
                raise BasicRuntimeError("Maximum call stack size exceeded", ln + 1) from exc
            except (ArithmeticError, TypeError, ValueError, IndexError) as exc:
                raise BasicRuntimeError(_error_message(exc), ln + 1) from exc
            if r is not None:
                return r
        return None

    def _call_sub(self, label, ln):
        body = self.subs.get(label)
        if body is None:
            raise BasicRuntimeError(f"_{label} is not defined", ln + 1)
        self._execute_block(body)   # 반환값은 버림 (END 는 이 함수만 끝냄)

    def exec_stmt(self, ln, st):
        typ = st[0]
        if typ == 'ASSIGN':
            self._assign(st[1], self.eval_expr(st[2]))
        elif typ == 'PRINT':
            args, newline = st[1], st[2]
            values = [self.eval_expr(a) for a in args]
            if newline:
                if values:
                    values[-1] = js_add(values[-1], "\n")
                else:
                    values = ["\n"]
            self.rt.print(*values)
        elif typ == 'CLS':
            self.rt.cls()
        elif typ == 'DIM':
            for _, name, dims in st[1]:
                init = "" if name.endswith("$") else 0
                self.vars[name] = self.rt.dim_array([self.eval_expr(d) for d in dims], init)
        elif typ == 'READ':
            if not self.data:
                raise BasicRuntimeError("_data is not defined", ln + 1)
            for target in st[1]:
                ptr = self.data_ptr
                if not isinstance(ptr, int) or not 0 <= ptr < len(self.data):
                    raise BasicRuntimeError("DATA exhausted", ln + 1)
                self.data_ptr = ptr + 1
                self._assign(target, self.data[ptr])
        elif typ == 'RESTORE':
            if not self.data:
                raise BasicRuntimeError("_restoreMap is not defined", ln + 1)
            self.data_ptr = self.restore_map.get(st[1])
        elif typ == 'FOR_BLOCK':
            return self._exec_for(st)
        elif typ == 'WHILE_BLOCK':
            while js_truthy(self.eval_expr(st[1])):
                r = self._execute_block(st[2])
                if r is not None:
                    return r
        elif typ == 'IF_BLOCK':
            if js_truthy(self.eval_expr(st[1])):
                return self._execute_block(st[2])
            return self._execute_block(st[3])
        elif typ == 'GOSUB':
            self._call_sub(st[1], ln)
        elif typ == 'ON_GOSUB':
            labels = st[2]
            for label in labels:
                if label not in self.subs:
                    raise BasicRuntimeError(f"_{label} is not defined", ln + 1)
            k = js_number(self.eval_expr(st[1])) - 1
            if isinstance(k, float):
                k = int(k) if k.is_integer() else -1
            if 0 <= k < len(labels):
                self._call_sub(labels[k], ln)
            else:
                log.debug("ON GOSUB index out of range at line %d", ln + 1)
        elif typ == 'RETURN':
            return ('RETURN', None)
        elif typ == 'END':
            return ('RETURN', "end")
        elif typ == 'STOP':
            return ('RETURN', "stop")
        elif typ == 'SUB':
            self.subs[st[1]] = st[2]
        else:
            raise BasicRuntimeError(f"unsupported statement: {typ}", ln + 1)
        return None

    def _exec_for(self, st):
        _, var, start, end, step, body = st
        target = ('VAR', var)
        self._assign(target, self.eval_expr(start))
        sign = constant_step_sign(step)
        while True:
            cur = self.vars[var]
            if sign is None:
                down = not js_compare('>=', self.eval_expr(step), 0)
            else:
                down = sign < 0
            limit = self.eval_expr(end)
            if not js_compare('>=' if down else '<=', cur, limit):
                return None
            r = self._execute_block(body)
            if r is not None:
                return r
            inc = self.eval_expr(step) if step is not None else 1
            self._assign(target, js_add(self.vars[var], inc))


def build_callable(program):
    """program -> fn(vm). 블록 구조 오류는 여기서 BasicSyntaxError"""
    interp = BasicInterpreter(program)

    def run(vm):
        interp.rt = vm
        return interp.run()
    return run
