import asyncio

import pytest

from basic_compiler import (
    START_CONFIG, compile_program, compile_script, execute_script, main, parse_args, run_callable,
)
from basic_examples import EXAMPLES, add_item


def test_for_loop_output(run_basic):
    assert run_basic("FOR i=1 TO 3: PRINT i: NEXT") == "1\n2\n3\n"


def test_data_read_output(run_basic):
    assert run_basic("DATA 1,2,3\nREAD a,b,c\nPRINT a+b+c") == "6\n"


def test_case_folding_at_runtime(run_basic):
    assert run_basic("A=1: a=a+1: PRINT a") == "2\n"


def test_round_int_fix(run_basic):
    assert run_basic("PRINT ROUND(2.5)\nPRINT INT(-2.3)\nPRINT FIX(-2.3)") == "3\n-3\n-2\n"


def test_comparison_is_minus_one(run_basic):
    assert run_basic("PRINT (1>0)\nPRINT (1<0)") == "-1\n0\n"


def test_arithmetic(run_basic):
    src = "PRINT 3+5*(2-8)\nPRINT 7\\2\nPRINT -7\\2\nPRINT -7 MOD 3\nPRINT 2^10\nPRINT 1/4\nPRINT 10/4*2"
    assert run_basic(src) == "-27\n3\n-3\n-1\n1024\n0.25\n5\n"


def test_logic_is_bitwise(run_basic):
    assert run_basic("PRINT NOT 0\nPRINT 6 AND 3\nPRINT 6 OR 1\nPRINT 6 XOR 3") == "-1\n2\n7\n5\n"


def test_strings(run_basic):
    src = 'a$="ab": PRINT a$+"c";LEN(a$)\nPRINT MID$("hello",2,3);LEFT$("hello",2);RIGHT$("hello",3)'
    assert run_basic(src) == "abc2\nellhello\n"


def test_print_separators_and_semicolon(run_basic):
    assert run_basic('PRINT "a";"b","c";\nPRINT "d"') == "abcd\n"


def test_dim_and_arrays(run_basic):
    src = "DIM a(9)\nPRINT LEN(a)\nDIM b(2,3)\nb(2,3)=7\nPRINT b(2,3)+b(0,0)\nDIM c$(1)\nPRINT c$(0)+\"x\""
    assert run_basic(src) == "10\n7\nx\n"


def test_step_direction(run_basic):
    assert run_basic("FOR i=3 TO 1 STEP -1: PRINT i;: NEXT") == "321\n"
    assert run_basic("s=-1: FOR i=2 TO 1 STEP s: PRINT i;: NEXT") == "21\n"
    assert run_basic("FOR i=1 TO 0: PRINT i: NEXT: PRINT \"done\"") == "done\n"


def test_while_wend(run_basic):
    assert run_basic("i=0\nWHILE i<3\ni=i+1\nPRINT i;\nWEND") == "123\n"


def test_if_else(run_basic):
    src = "FOR i=1 TO 2\nIF i=1 THEN PRINT \"one\" ELSE PRINT \"two\"\nNEXT"
    assert run_basic(src) == "one\ntwo\n"


def test_gosub_and_end(run_basic):
    assert run_basic('10 GOSUB 100\n20 END\n100 PRINT "x"\n110 RETURN') == "x\nend\n"


def test_end_inside_subroutine_only_leaves_it(run_basic):
    src = 'GOSUB 100\nPRINT "back"\nEND\n100 PRINT "sub": END\nRETURN'
    assert run_basic(src) == "sub\nback\nend\n"


def test_on_gosub_selects_one_based(run_basic):
    src = 'n=2\nON n GOSUB 100, 200\nEND\n100 PRINT "a"\nRETURN\n200 PRINT "b"\nRETURN'
    assert run_basic(src) == "b\nend\n"


def test_on_gosub_out_of_range_is_noop(run_basic):
    src = 'a=3\nON a GOSUB 100\nPRINT "done"\nEND\n100 PRINT "sub"\nRETURN'
    assert run_basic(src) == "done\nend\n"


def test_on_gosub_unknown_target_is_error(run_basic):
    assert run_basic("ON 1 GOSUB 500") == "ERROR: _500 is not defined (line 1)\n"


def test_return_after_other_statements_leaves_code_inline(run_basic):
    src = 'GOSUB 100\nEND\n100 PRINT "x": RETURN'
    assert run_basic(src) == "ERROR: _100 is not defined (line 1)\n"


def test_string_literals_and_escapes(run_basic):
    assert run_basic('PRINT "a";"b"') == "ab\n"
    assert run_basic('DATA "a","b"\nREAD x$,y$\nPRINT y$') == "b\n"
    assert run_basic('PRINT "say \\"hi\\""') == 'say "hi"\n'
    assert run_basic('PRINT "a\\nb"') == "a\\nb\n"


def test_leading_zero_decimal_is_not_octal(run_basic):
    assert run_basic("PRINT 010+1") == "11\n"


def test_restore(run_basic):
    assert run_basic(EXAMPLES["restore"]) == "6\nab\n1\n"


def test_testsub_example(run_basic):
    expected = [
        "start", "sub200", "inside sub200", "sub100", "in between",
        "sub300", "inside sub300", "sub200", "inside sub200", "sub100", "at end",
    ]
    assert run_basic(EXAMPLES["testsub"]) == "\n".join(expected) + "\n"


def test_lifegame_example(run_basic):
    out = run_basic(EXAMPLES["lifegame"])
    assert out.startswith("L I F E G A M E\n")
    assert len(out.splitlines()) == 10


@pytest.mark.parametrize("name", sorted(EXAMPLES))
def test_examples_compile(name):
    assert not compile_script(EXAMPLES[name]).startswith("ERROR")


@pytest.mark.parametrize("src, expected", [
    ("PRINT 1/0", "ERROR: Division by zero (line 1)\n"),
    ("DATA 1\nREAD a,b", "ERROR: DATA exhausted (line 2)\n"),
    ("READ a", "ERROR: _data is not defined (line 1)\n"),
    ("RESTORE", "ERROR: _restoreMap is not defined (line 1)\n"),
    ("GOSUB 100", "ERROR: _100 is not defined (line 1)\n"),
    ("NEXT", "ERROR: Unexpected token '}' (line 1)\n"),
    ("FOR i=1 TO 2", "ERROR: Unexpected end of input (line 1)\n"),
    ("PRINT SQR(-1)", "ERROR: math domain error (line 1)\n"),
    ("PRINT (", "ERROR\n"),
])
def test_errors(run_basic, src, expected):
    assert run_basic(src) == expected


def test_execute_resets_output_and_terminates_with_newline(vm):
    vm.set_output("old")
    program = compile_program('PRINT "x";')
    assert asyncio.run(execute_script(program, vm)) == "x\n"
    program = compile_program('PRINT "y"')
    assert asyncio.run(execute_script(program, vm)) == "y\n"


def test_execute_error_text(vm):
    assert asyncio.run(execute_script("ERROR: Parsing failed: x", vm)) == "ERROR\n"


def test_run_callable_awaits_result(vm):
    async def fn(o):
        o.print("hi")
        return "done"

    assert asyncio.run(run_callable(fn, vm)) == "done"
    assert vm.get_output() == "hi"
    assert asyncio.run(run_callable(lambda o: 5, vm)) == 5


def test_parse_args_types_from_defaults():
    config = parse_args(["debug=1", "input=a=b", "bogus"], dict(START_CONFIG))
    assert config["debug"] == 1
    assert config["input"] == "a=b"
    assert config["fileName"] == ""


def test_add_item_derives_key():
    key = add_item("", "\n10 REM hello world\nPRINT 1\n")
    try:
        assert key == "hello"
        assert EXAMPLES["hello"] == "10 REM hello world\nPRINT 1"
    finally:
        EXAMPLES.pop(key, None)


def test_main_prints_output(capsys):
    assert main(["input=?3+5*(2-8)"]) == 0
    assert capsys.readouterr().out == "-27\n"


def test_main_runs_file(tmp_path, capsys):
    path = tmp_path / "prog.bas"
    path.write_text("FOR i=1 TO 2: PRINT i;: NEXT\n", encoding="utf-8")
    assert main([f"fileName={path}"]) == 0
    assert capsys.readouterr().out == "12\n"


def test_main_without_input(capsys):
    assert main([]) == 1
    assert capsys.readouterr().out == "No input\n"
