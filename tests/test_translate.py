import pytest

from basic_compiler import compile_program, compile_script


def test_for_loop_text():
    js = compile_script("FOR i=1 TO 3: PRINT i: NEXT")
    assert js == 'let i = 0;\nfor (i = 1; i <= 3; i += 1) {; _o.print(i + "\\n"); };'


def test_case_folded_variables_share_one_declaration():
    js = compile_script("A=1: a=a+1")
    assert js.startswith("let a = 0;\n")
    assert "a = a + 1" in js


def test_js_keyword_variable_gets_prefix():
    js = compile_script("case=5")
    assert js == "let _case = 0;\n_case = 5;"


@pytest.mark.parametrize("src, expected", [
    ('PRINT "a";', '_o.print("a");'),
    ("PRINT", '_o.print("\\n");'),
    ('? "a";"b"', '_o.print("a", "b" + "\\n");'),
    ("CLS", "_o.cls();"),
    ("REM hello", "// hello"),
    ("' just a comment", "// just a comment"),
    ("END", 'return "end";'),
    ("STOP", 'return "stop";'),
])
def test_simple_statements(src, expected):
    assert compile_script(src) == expected


@pytest.mark.parametrize("src, expected", [
    ("a=&FF", "a = 0xFF"),
    ("a=&hff", "a = 0xff"),
    ("a=&x101", "a = 0b101"),
    ("a=1<2", "a = 1 < 2 ? -1 : 0"),
    ("a=(1<2)=-1", "a = (1 < 2 ? -1 : 0) === -1 ? -1 : 0"),
    ("a=1<>2", "a = 1 !== 2 ? -1 : 0"),
    ("a=2^3", "a = Math.pow(2, 3)"),
    ("a=7\\2", "a = Math.trunc(7 / 2)"),
    ("a=7 MOD 2", "a = 7 % 2"),
    ("a=(1+2)*3", "a = (1 + 2) * 3"),
    ("a=NOT 1", "a = ~(1)"),
    ("a=1 AND 2 OR 4", "a = 1 & 2 | 4"),
    ("a=- -1", "a = -(-1)"),
    ("a=INT(2.5)", "a = Math.floor(2.5)"),
    ("a=ROUND(2.345, 2)", "a = (Math.round(2.345 * Math.pow(10, 2)) / Math.pow(10, 2))"),
    ('a=MID$("hello", 2, 3)', 'a = ("hello").substr(2 - 1, 3)'),
    ('a=RIGHT$("hello", n+1)', 'a = ("hello").slice(-(n + 1))'),
    ("a=HEX$(255, 4)", 'a = (255).toString(16).toUpperCase().padStart(4 || 0, "0")'),
    ('a=VAL("12")', 'a = Number("12")'),
])
def test_expressions(src, expected):
    assert expected in compile_script(src)


def test_print_trailing_semicolon_suppresses_newline():
    assert compile_script('PRINT "x";') == '_o.print("x");'
    assert compile_script('PRINT "x"') == '_o.print("x" + "\\n");'


def test_line_comment_after_statement():
    assert compile_script("a=1 ' note") == "let a = 0;\na = 1; // note"
    assert compile_script("a=1: ' note") == "let a = 0;\na = 1; // note"


def test_dim_uses_runtime_builder():
    js = compile_script("DIM a(2,3), b$(4)")
    assert js == 'let a = 0, b$ = "";\na = _o.dimArray([2,3]); b$ = _o.dimArray([4], "");'


def test_step_direction():
    assert "i >= 1" in compile_script("FOR i=3 TO 1 STEP -1: NEXT")
    assert "i <= 3" in compile_script("FOR i=1 TO 3 STEP 2: NEXT")
    js = compile_script("FOR i=1 TO 3 STEP s: NEXT")
    assert "s >= 0 ? i <= 3 : i >= 3" in js
    assert "i += s" in js


def test_step_zero_counts_up():
    js = compile_script("FOR i=1 TO 3 STEP 0: NEXT")
    assert "i <= 3" in js
    assert "i += 0" in js


def test_string_literals_end_at_their_own_quote():
    assert compile_script('PRINT "a";"b"') == '_o.print("a", "b" + "\\n");'
    program = compile_program('DATA "a","b"')
    assert program.data_list == ["a", "b"]


def test_string_escapes():
    assert compile_script('a$="say \\"hi\\""') == 'let a$ = "";\na$ = "say \\"hi\\"";'
    # \" \\ 외의 역슬래시는 글자 그대로
    assert compile_script('a$="a\\nb"') == 'let a$ = "";\na$ = "a\\\\nb";'


@pytest.mark.parametrize("src, expected", [
    ("a=010", "a = 10;"),
    ("a=007.5", "a = 7.5;"),
    ("a=0.05", "a = 0.05;"),
    ("a=1.05", "a = 1.05;"),
    ("a=0", "a = 0;"),
])
def test_decimal_leading_zeros_are_dropped(src, expected):
    assert compile_script(src).endswith(expected)


def test_only_a_lone_return_closes_a_subroutine():
    js = compile_script('GOSUB 100\nEND\n100 PRINT "x": RETURN')
    assert "function _100" not in js
    js = compile_script("GOSUB 100\nEND\n100 PRINT \"x\"\nRETURN ' done")
    assert "function _100() {" in js


def test_next_with_variables_closes_each_loop():
    js = compile_script("FOR i=1 TO 2: FOR j=1 TO 2: NEXT j, i")
    assert js.endswith("}};")


def test_if_else_text():
    js = compile_script("IF a THEN PRINT 1 ELSE PRINT 2")
    assert 'if (a) {\n_o.print(1 + "\\n")\n} else {\n_o.print(2 + "\\n")\n};' in js


def test_gosub_region_becomes_function():
    js = compile_script('10 GOSUB 100\n20 END\n100 PRINT "x"\n110 RETURN\n')
    assert js == (
        '_100();\n'
        'return "end";\n'
        'function _100() {\n'
        '  _o.print("x" + "\\n");\n'
        '  return;\n'
        '}'
    )


def test_every_call_site_uses_same_syntax():
    js = compile_script("GOSUB 100\nGOSUB 100\n100 a=1\nRETURN")
    assert js.count("_100();") == 2
    assert js.count("function _100() {") == 1


def test_on_gosub_text():
    js = compile_script("ON n GOSUB 10, 20")
    assert "[_10, _20][n - 1]?.();" in js


def test_data_header_and_factories():
    program = compile_program("10 DATA 1, -2, \"x\"\nRESTORE 10\nREAD a")
    js = program.text
    assert js.startswith("let a = 0;\nconst _data = _getData();\nconst _restoreMap = _getRestore();\nlet _dataPtr = 0;")
    assert "_dataPtr = _restoreMap[10];" in js
    assert "a = _data[_dataPtr++];" in js
    assert js.endswith('function _getData() {\nreturn [\n1,\n-2,\n"x"\n];\n}\nfunction _getRestore() {\nreturn {"10":0};\n}')
    assert program.data_list == [1, -2, "x"]
    assert program.restore_map == {"10": 0}


def test_compile_is_repeatable():
    src = "10 DATA 1\nGOSUB 100\nEND\n100 READ a: PRINT a\nRETURN"
    assert compile_script(src) == compile_script(src)


def test_keywords_are_case_insensitive():
    assert compile_script("print 1") == compile_script("PRINT 1")


def test_final_newline_adds_no_line():
    assert compile_script("a=1\n") == compile_script("a=1")


def test_parse_error_is_reported():
    js = compile_script("PRINT (")
    assert js.startswith("ERROR: Parsing failed: ")
    program = compile_program("a = = 1")
    assert not program.ok
