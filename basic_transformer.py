# -*- coding: utf-8 -*-
"""
lark Tree -> tuple IR
- 식(Expression)은 ExprMixin, 문장/줄 구조는 BasicTransformer
- 변환하면서 CompileContext 에 변수/라벨/DATA 정보를 기록 (1st pass)
"""

import json
import re
from typing import List, Optional, Tuple

from lark import Transformer, Token, v_args

Stmt = Tuple[str, ...]

# 문자열 안의 이스케이프는 \" 와 \\ 만 인정 (그 외 \ 는 글자 그대로)
_STRING_ESCAPE = re.compile(r'\\(["\\])')
_LEADING_ZEROS = re.compile(r'^0+(?=\d)')


class Line:
    """소스 한 줄: index(0부터), label, 변환된 문장들, 줄 끝 주석"""
    __slots__ = ("index", "label", "stmts", "comment")

    def __init__(self, index, label=None, stmts=None, comment=None):
        self.index = index
        self.label = label
        self.stmts: List[Stmt] = stmts or []
        self.comment: Optional[str] = comment

    def __repr__(self):
        return f"Line({self.index}, {self.label!r}, {self.stmts!r}, {self.comment!r})"


# ====== Expression 부분: inline ======

@v_args(inline=True)
class ExprMixin(Transformer):
    # 숫자: ('NUM', 값, JS 표기)
    def decimal(self, tok):
        # 010 은 JS 에서 8진수로 읽히므로 앞의 0 을 뗀다
        s = _LEADING_ZEROS.sub('', str(tok), count=1)
        if any(c in s for c in ".Ee"):
            return ('NUM', float(s), s)
        return ('NUM', int(s), s)

    def hexnum(self, tok):
        digits = str(tok)[1:]
        if digits[:1] in ('h', 'H'):
            digits = digits[1:]
        return ('NUM', int(digits, 16), "0x" + digits)

    def binnum(self, tok):
        digits = str(tok)[2:]
        return ('NUM', int(digits, 2), "0b" + digits)

    def neg_number(self, num):
        _, value, text = num
        return ('NUM', -value, "-" + text)

    # 문자열: ESCAPED_STRING 이라 양끝에 " 가 있음
    def string(self, tok):
        value = _STRING_ESCAPE.sub(r'\1', str(tok)[1:-1])
        return ('STR', value, json.dumps(value, ensure_ascii=False))

    def paren(self, e): return ('PAREN', e)

    # 산술 이항연산
    def add(self, a, b): return ('BIN', '+', a, b)
    def sub(self, a, b): return ('BIN', '-', a, b)
    def mul(self, a, b): return ('BIN', '*', a, b)
    def div(self, a, b): return ('BIN', '/', a, b)
    def idiv(self, a, b): return ('BIN', '\\', a, b)
    def mod(self, a, b): return ('BIN', 'MOD', a, b)
    def pow(self, a, b): return ('BIN', '^', a, b)

    # 단항
    def neg(self, x): return ('UN', '-', x)
    def pos(self, x): return ('UN', '+', x)

    # 비교 (-1 / 0)
    def eq(self, a, b): return ('CMP', '=', a, b)
    def ne(self, a, b): return ('CMP', '<>', a, b)
    def lt(self, a, b): return ('CMP', '<', a, b)
    def le(self, a, b): return ('CMP', '<=', a, b)
    def gt(self, a, b): return ('CMP', '>', a, b)
    def ge(self, a, b): return ('CMP', '>=', a, b)

    # 논리 (32bit 비트연산)
    def and_(self, a, b): return ('BIN', 'AND', a, b)
    def or_(self, a, b): return ('BIN', 'OR', a, b)
    def xor_(self, a, b): return ('BIN', 'XOR', a, b)
    def not_(self, x): return ('NOT', x)

    # 함수 이름 토큰 -> 대문자 문자열
    def fn_one(self, tok): return str(tok).upper()
    def fn_opt(self, tok): return str(tok).upper()
    def fn_two(self, tok): return str(tok).upper()
    def fn_list(self, tok): return str(tok).upper()
    def fn_const(self, tok): return str(tok).upper()

    def func(self, name, *args):
        if isinstance(name, Token):
            name = str(name).upper()
        return ('CALL', name, [a for a in args if a is not None])


# ====== 전체 Transformer ======

@v_args(inline=True)
class BasicTransformer(ExprMixin):
    """
    Tree -> [Line, ...]
    ctx(CompileContext) 에 변수 사용, 라벨, GOSUB 참조, DATA/RESTORE 를 기록한다.
    """

    def __init__(self, ctx):
        super().__init__()
        self.ctx = ctx

    # --- 변수 ---
    def var(self, tok):
        return ('VAR', self.ctx.registry.resolve(str(tok)))

    def array(self, var, *indices):
        return ('ARR', var[1], list(indices))

    # --- 최상위 / 라인 구조 ---
    def start(self, *lines):
        return list(lines)

    def line(self, *children):
        label = None
        stmts: List[Stmt] = []
        for ch in children:
            if isinstance(ch, Token):
                label = str(ch)
            else:
                stmts = ch

        ctx = self.ctx
        index = ctx.line_index
        if label is not None:
            ctx.labels.on_label_seen(label, index, len(ctx.data.data_list))
        for st in self._walk(stmts):
            if st[0] == 'DATA':
                ctx.data.on_data(st[1], ctx.labels)

        comment = None
        if stmts and stmts[-1][0] == 'COMMENT':
            comment = stmts[-1][1]
            stmts = stmts[:-1]
        # RETURN 하나뿐인 줄만 서브루틴 구역의 끝으로 본다
        if len(stmts) == 1 and stmts[0][0] == 'RETURN':
            ctx.labels.on_return_seen(index)

        ctx.line_index += 1
        return Line(index, label, stmts, comment)

    def _walk(self, stmts):
        # IF 분기 안쪽까지 순서대로
        for st in stmts:
            yield st
            if st[0] == 'IF':
                yield from self._walk(st[2])
                if st[3]:
                    yield from self._walk(st[3])

    def statements(self, stmts):
        return stmts

    def statements_comment(self, stmts, tok):
        return stmts + [('COMMENT', str(tok)[1:])]

    def comment_only(self, tok):
        return [('COMMENT', str(tok)[1:])]

    def stmt_list(self, head, stmt=None):
        if stmt is None:
            return [head]
        return head + [stmt]

    # --- 문장 ---
    def assign(self, target, expr):
        return ('ASSIGN', target, expr)

    def print_stmt(self, items=None):
        if items is None:
            return ('PRINT', [], True)
        args, newline = items
        return ('PRINT', args, newline)

    def print_list(self, e): return ([e], True)
    def print_tail_semi(self, e): return ([e], False)
    def print_tail_comma(self, e): return ([e], True)

    def print_more(self, e, rest):
        args, newline = rest
        return ([e] + args, newline)

    def cls_stmt(self): return ('CLS',)

    def data_stmt(self, *items):
        return ('DATA', list(items))

    def dim_stmt(self, *arrays):
        return ('DIM', list(arrays))

    def end_stmt(self): return ('END',)
    def stop_stmt(self): return ('STOP',)
    def return_stmt(self): return ('RETURN',)
    def wend_stmt(self): return ('WEND',)

    def for_stmt(self, var, start, end, step=None):
        return ('FOR', var[1], start, end, step)

    def next_stmt(self, *variables):
        return ('NEXT', [v[1] for v in variables])

    def while_stmt(self, cond):
        return ('WHILE', cond)

    def if_stmt(self, cond, then, else_=None):
        return ('IF', cond, then, else_)

    def gosub_stmt(self, label):
        label = str(label)
        self.ctx.labels.on_gosub_reference(label)
        return ('GOSUB', label)

    def on_gosub_stmt(self, expr, *labels):
        labels = [str(l) for l in labels]
        for l in labels:
            self.ctx.labels.on_gosub_reference(l)
        return ('ON_GOSUB', expr, labels)

    def read_stmt(self, *targets):
        return ('READ', list(targets))

    def restore_stmt(self, label=None):
        return ('RESTORE', self.ctx.data.on_restore(label))

    def rem_stmt(self, tok):
        return ('REM', str(tok)[3:].strip())


def transform(tree, ctx) -> List[Line]:
    return BasicTransformer(ctx).transform(tree)
