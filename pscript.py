#!/usr/bin/env python
import argparse
import json
import sys
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from pipescript import Config, PipeScriptError, Runtime, parse
from pipescript.types import render


def _enable_tracing():
    from opentelemetry import trace
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    trace.set_tracer_provider(provider)


def _cmd_run(args) -> int:
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: Could not find script '{args.file}'")
        return 1
    try:
        config = Config.from_env(**({"strict_variables": True} if args.strict else {}))
        rt = Runtime(config=config)
        result = rt.run(path)
    except (PipeScriptError, ValidationError) as e:
        print(f"[Error] {e}")
        return 1
    if args.show_result:
        print(render(result))
    return 0


def _cmd_tree(args) -> int:
    try:
        tree = parse(Path(args.file), Config.from_env())
    except (PipeScriptError, OSError) as e:
        print(f"[Error] {e}")
        return 1
    print(json.dumps([node.to_dict() for node in tree], indent=2))
    return 0


def _cmd_lint(args) -> int:
    # editor integration: report the first problem, always exit cleanly
    content = sys.stdin.read()
    try:
        parse(content, Config.from_env())
    except PipeScriptError as e:
        print(f"line {e.line or 1}: {e.message}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="PipeScript - line-oriented pipeline scripting")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every executed statement to stderr")
    parser.add_argument("--trace", action="store_true", help="Print OpenTelemetry spans to stderr")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run a script file")
    run_parser.add_argument("file", help="Path of the script")
    run_parser.add_argument("--strict", action="store_true", help="Treat undefined variables as errors")
    run_parser.add_argument("--show-result", action="store_true", help="Print the final value")

    tree_parser = subparsers.add_parser("tree", help="Print the parsed statement tree as JSON")
    tree_parser.add_argument("file", help="Path of the script")

    subparsers.add_parser("lint", help="Check a script read from stdin")

    args = parser.parse_args(argv)

    if args.verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")
        logger.enable("pipescript")
    if args.trace:
        _enable_tracing()

    handlers = {"run": _cmd_run, "tree": _cmd_tree, "lint": _cmd_lint}
    if args.command not in handlers:
        parser.print_help()
        return 1
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
