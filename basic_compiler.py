# -*- coding: utf-8 -*-
"""
BASIC -> JavaScript 컴파일 + 실행
사용 예:
  basic2js input="?3 + 5 * (2 - 8)"
  basic2js fileName=examples/example.bas
  basic2js example=euler debug=1
"""

import asyncio
import inspect
import logging
import sys

from lark.exceptions import UnexpectedInput, VisitError

from basic_assembler import CompiledProgram, assemble
from basic_context import CompileContext
from basic_examples import EXAMPLES
from basic_grammar import BasicError, _lex_window, parse_basic
from basic_interpreter import build_callable
from basic_runtime import RuntimeSupport, js_str, js_truthy
from basic_transformer import transform

log = logging.getLogger("basic2js")

START_CONFIG = {
    "debug": 0,
    "example": "",
    "fileName": "",
    "input": "",
}

_vm = RuntimeSupport()


# -----------------------------
# 컴파일
# -----------------------------
def compile_program(script: str) -> CompiledProgram:
    ctx = CompileContext()   # 컴파일마다 새 상태
    try:
        tree = parse_basic(script)
    except UnexpectedInput as e:
        msg = str(e)
        pos = getattr(e, "pos_in_stream", None)
        if pos is not None and pos >= 0:
            msg += "\n" + _lex_window(script, pos)
        log.debug("parse failed: %s", msg)
        return CompiledProgram("ERROR: Parsing failed: " + msg)

    try:
        lines = transform(tree, ctx)
        program = assemble(lines, ctx)
    except VisitError as e:
        exc = e.orig_exc
        return CompiledProgram("ERROR: Parsing evaluator failed: " + _describe(exc))
    except (BasicError, ValueError, TypeError, KeyError, IndexError) as exc:
        return CompiledProgram("ERROR: Parsing evaluator failed: " + _describe(exc))

    log.debug("compiled %d lines, %d variables, %d data values",
              ctx.line_index, len(ctx.registry), len(ctx.data.data_list))
    return program


def compile_script(script: str) -> str:
    return compile_program(script).text


def _describe(exc):
    if isinstance(exc, BasicError):
        return exc.describe()
    return str(exc) or type(exc).__name__


# -----------------------------
# 실행 (sandbox)
# -----------------------------
async def run_callable(fn, vm):
    """fn(vm) 호출, 결과가 awaitable 이면 기다린다"""
    result = fn(vm)
    if inspect.isawaitable(result):
        result = await result
    return result


async def execute_script(program, vm=None) -> str:
    vm = vm or _vm
    vm.set_output("")

    text = program if isinstance(program, str) else program.text
    if text.startswith("ERROR"):
        return "ERROR\n"
    if isinstance(program, str):
        raise TypeError("execute_script needs a CompiledProgram")

    try:
        fn = build_callable(program)
        result = await run_callable(fn, vm)
        output = vm.get_output()
        if js_truthy(result):
            output += js_str(result)
    except BasicError as e:
        log.debug("execution failed: %s", e.describe())
        output = "ERROR: " + e.describe()

    if not output.endswith("\n"):
        output += "\n"
    return output


def run_script(script: str, vm=None) -> str:
    program = compile_program(script)
    return asyncio.run(execute_script(program, vm))


# -----------------------------
# CLI
# -----------------------------
def parse_args(args, config):
    """key=value 인자를 config 의 기본값 타입에 맞춰 넣는다"""
    for arg in args:
        name, sep, value = arg.partition("=")
        if not sep:
            continue
        default = config.get(name)
        if isinstance(default, bool):
            config[name] = value == "true"
        elif isinstance(default, (int, float)):
            try:
                config[name] = int(value)
            except ValueError:
                config[name] = float(value)
        else:
            config[name] = value
    return config


def _setup_logging(debug):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s LOG: %(message)s",
    )


def start(text):
    if text == "":
        print("No input")
        return 1
    program = compile_program(text)
    log.info("Compiled:\n%s\n", program.text)
    output = asyncio.run(execute_script(program))
    print(output, end="")
    return 0 if program.ok else 1


def main(argv=None):
    config = parse_args(sys.argv[1:] if argv is None else argv, dict(START_CONFIG))
    _setup_logging(config["debug"])
    log.info("starting...")

    text = config["input"] or ""
    if config["fileName"]:
        with open(config["fileName"], encoding="utf-8") as f:
            text = f.read()
    elif config["example"]:
        if config["example"] not in EXAMPLES:
            print(f"Unknown example: {config['example']}")
            return 1
        text += EXAMPLES[config["example"]]
    return start(text)


if __name__ == "__main__":
    sys.exit(main())
