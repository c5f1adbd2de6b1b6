# -*- coding: utf-8 -*-
"""
CPC 계열 BASIC 문법 (lark, LALR + contextual lexer)
- 키워드는 대소문자 무시 ("PRINT"i), NAME/STRNAME 정규식과 겹치면 lark가 키워드로 재분류
- 라벨(LABEL)은 줄 맨 앞 숫자, GOSUB/RESTORE 대상
필요 패키지: pip install lark
"""

from lark import Lark

# -----------------------------
# 1) Grammar
# -----------------------------
GRAMMAR = r"""
start: line (_NL line)*

line: LABEL? statements?

// 줄 끝 주석은 문장 목록 뒤에만 붙는다 ("a=1 'x", "a=1: 'x")
statements: stmt_list
          | stmt_list COMMENT          -> statements_comment
          | stmt_list ":" COMMENT      -> statements_comment
          | COMMENT                    -> comment_only

// ★ 왼쪽 재귀로 둬야 ":" 뒤 COMMENT 와 충돌하지 않음
stmt_list: statement
         | stmt_list ":" statement

?statement: assign
          | print_stmt
          | cls_stmt
          | data_stmt
          | dim_stmt
          | end_stmt
          | for_stmt
          | gosub_stmt
          | if_stmt
          | next_stmt
          | on_gosub_stmt
          | read_stmt
          | rem_stmt
          | restore_stmt
          | return_stmt
          | stop_stmt
          | wend_stmt
          | while_stmt

// ----- statements -----
assign: _LET? target "=" expr
?target: var | array

print_stmt: (_PRINT | _QMARK) print_list?
print_list: expr
          | expr ";"                   -> print_tail_semi
          | expr ","                   -> print_tail_comma
          | expr ";" print_list        -> print_more
          | expr "," print_list        -> print_more

cls_stmt: _CLS

data_stmt: _DATA data_item ("," data_item)*
?data_item: STRING                     -> string
          | number
          | "-" number                 -> neg_number

dim_stmt: _DIM array ("," array)*
end_stmt: _END
stop_stmt: _STOP

for_stmt: _FOR var "=" expr _TO expr (_STEP expr)?
next_stmt: _NEXT (var ("," var)*)?
while_stmt: _WHILE expr
wend_stmt: _WEND

if_stmt: _IF expr _THEN statements (_ELSE statements)?

gosub_stmt: _GOSUB LABEL
on_gosub_stmt: _ON expr _GOSUB LABEL ("," LABEL)*
return_stmt: _RETURN

read_stmt: _READ target ("," target)*
restore_stmt: _RESTORE LABEL?

rem_stmt: REM_LINE

// ----- expressions (낮은 우선순위 -> 높은 우선순위) -----
?expr: or_expr _XOR expr               -> xor_
     | or_expr
?or_expr: and_expr _OR or_expr         -> or_
        | and_expr
?and_expr: not_expr _AND and_expr      -> and_
         | not_expr
?not_expr: _NOT not_expr               -> not_
         | cmp_expr
?cmp_expr: cmp_expr "=" add_expr       -> eq
         | cmp_expr "<>" add_expr      -> ne
         | cmp_expr "<" add_expr       -> lt
         | cmp_expr "<=" add_expr      -> le
         | cmp_expr ">" add_expr       -> gt
         | cmp_expr ">=" add_expr      -> ge
         | add_expr
?add_expr: add_expr "+" mod_expr       -> add
         | add_expr "-" mod_expr       -> sub
         | mod_expr
?mod_expr: mod_expr _MOD idiv_expr     -> mod
         | idiv_expr
?idiv_expr: idiv_expr "\\" mul_expr    -> idiv
          | mul_expr
?mul_expr: mul_expr "*" pow_expr       -> mul
         | mul_expr "/" pow_expr       -> div
         | pow_expr
?pow_expr: unary "^" pow_expr          -> pow
         | unary
?unary: "-" unary                      -> neg
      | "+" unary                      -> pos
      | atom

?atom: number
     | STRING                          -> string
     | var
     | array
     | "(" expr ")"                    -> paren
     | fn_one "(" expr ")"             -> func
     | fn_opt "(" expr ("," expr)? ")" -> func
     | fn_two "(" expr "," expr ")"    -> func
     | MID "(" expr "," expr ("," expr)? ")" -> func
     | fn_list "(" expr ("," expr)* ")" -> func
     | fn_const                        -> func
     | RND ("(" expr? ")")?            -> func

?number: DECIMAL                       -> decimal
       | HEXNUM                        -> hexnum
       | BINNUM                        -> binnum

var: NAME | STRNAME
array: var "(" expr ("," expr)* ")"

fn_one: ABS | ASC | ATN | CHR | CINT | COS | EXP | FIX | INT | LEN | LOG | LOG10
      | LOWER | SGN | SIN | SPACE | SQR | STR | TAN | UPPER | VAL
fn_opt: BIN | HEX | ROUND
fn_two: LEFT | RIGHT | STRING_FN
fn_list: MAX | MIN
fn_const: PI | TIME

// ----- keywords (문장용은 '_' 로 트리에서 제거) -----
_CLS: "CLS"i
_DATA: "DATA"i
_DIM: "DIM"i
_ELSE: "ELSE"i
_END: "END"i
_FOR: "FOR"i
_GOSUB: "GOSUB"i
_IF: "IF"i
_LET: "LET"i
_NEXT: "NEXT"i
_ON: "ON"i
_PRINT: "PRINT"i
_QMARK: "?"
_READ: "READ"i
_RESTORE: "RESTORE"i
_RETURN: "RETURN"i
_STEP: "STEP"i
_STOP: "STOP"i
_THEN: "THEN"i
_TO: "TO"i
_WEND: "WEND"i
_WHILE: "WHILE"i
_AND: "AND"i
_MOD: "MOD"i
_NOT: "NOT"i
_OR: "OR"i
_XOR: "XOR"i

// 함수 이름은 트리에 남긴다
ABS: "ABS"i
ASC: "ASC"i
ATN: "ATN"i
BIN: "BIN$"i
CHR: "CHR$"i
CINT: "CINT"i
COS: "COS"i
EXP: "EXP"i
FIX: "FIX"i
HEX: "HEX$"i
INT: "INT"i
LEFT: "LEFT$"i
LEN: "LEN"i
LOG: "LOG"i
LOG10: "LOG10"i
LOWER: "LOWER$"i
MAX: "MAX"i
MID: "MID$"i
MIN: "MIN"i
PI: "PI"i
RIGHT: "RIGHT$"i
RND: "RND"i
ROUND: "ROUND"i
SGN: "SGN"i
SIN: "SIN"i
SPACE: "SPACE$"i
SQR: "SQR"i
STR: "STR$"i
STRING_FN: "STRING$"i
TAN: "TAN"i
TIME: "TIME"i
UPPER: "UPPER$"i
VAL: "VAL"i

// ----- tokens -----
LABEL: /\d+/
DECIMAL: /(\d*\.\d+|\d+)(e[+-]?\d+)?/i
HEXNUM: /&h?[0-9a-f]+/i
BINNUM: /&x[01]+/i
STRING: ESCAPED_STRING
NAME: /[a-z][a-z0-9]*/i
STRNAME: /[a-z][a-z0-9]*\$/i
REM_LINE: /rem(?![a-z0-9$])[^\n]*/i
COMMENT: /'[^\n]*/
_NL: /\r?\n/

%import common.ESCAPED_STRING
%import common.WS_INLINE
%ignore WS_INLINE
"""


class BasicError(Exception):
    def __init__(self, message, line_no=None, text=""):
        super().__init__(message)
        self.message = message
        self.line_no = line_no
        self.text = text

    def describe(self):
        if self.line_no is None:
            return self.message
        return f"{self.message} (line {self.line_no})"


class BasicSyntaxError(BasicError):
    """문법/블록 구조 오류 (NEXT without FOR 등 포함)"""


# -----------------------------
# 2) Parser 생성 (한 번만 만들고 재사용)
# -----------------------------
_PARSER = None


def get_parser():
    global _PARSER
    if _PARSER is None:
        _PARSER = Lark(GRAMMAR, parser="lalr", lexer="contextual", start="start")
    return _PARSER


def parse_basic(text):
    # 마지막 줄바꿈 하나는 빈 줄로 치지 않는다
    if text.endswith("\n"):
        text = text[:-1]
        if text.endswith("\r"):
            text = text[:-1]
    return get_parser().parse(text)


def _lex_window(text, pos, width=120):
    a = max(0, pos-width//2); b = min(len(text), pos+width//2)
    caret = ' ' * (pos-a) + '^'
    return text[a:b] + "\n" + caret
