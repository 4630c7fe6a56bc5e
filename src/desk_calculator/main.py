"""
Command line entrypoint.

Subcommands:
- ``eval``: evaluate the expressions given as arguments
- ``batch``: evaluate an operations file (plain text or archive) into a results file
- ``repl``: drive a keypad calculator session from standard input
"""

import argparse
import logging
from pathlib import Path
import sys
from typing import List, Optional, TextIO

from pydantic import BaseModel, Field, FilePath, ValidationError

from desk_calculator.batch.runner import BatchRunner
from desk_calculator.common.evaluator import ExpressionEvaluator
from desk_calculator.common.logger import configure_logging
from desk_calculator.common.models import CalculatorSettings
from desk_calculator.session.calculator import Calculator


HISTORY_COMMAND = ":history"
QUIT_COMMAND = ":quit"


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    command : str
        Selected subcommand.
    expressions : List[str]
        Expressions for ``eval``.
    file_path : Optional[FilePath]
        Operations file for ``batch``.
    output : Optional[Path]
        Results file for ``batch``.
    decimal_places : int
        Digits shown after the decimal point.
    verbose : bool
        Log at debug level.
    """

    command: str
    expressions: List[str] = Field(default_factory=list)
    file_path: Optional[FilePath] = None
    output: Optional[Path] = None
    decimal_places: int = Field(default=4, ge=0, le=15)
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    :return: Configured parser
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="desk-calculator",
        description="Keypad calculator evaluating + - * / % and parentheses",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at debug level")
    parser.add_argument(
        "--decimal-places",
        type=int,
        default=4,
        help="Digits shown after the decimal point for fractional results",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    eval_parser = subparsers.add_parser("eval", help="Evaluate expressions given as arguments")
    eval_parser.add_argument("expressions", nargs="+", help="Expressions such as 2+3*4")

    batch_parser = subparsers.add_parser("batch", help="Evaluate an operations file")
    batch_parser.add_argument("file_path", help="Path to a .txt, .zip, .tar.xz or .7z file of expressions")
    batch_parser.add_argument("-o", "--output", help="Results file (defaults to <input>_results.txt)")

    subparsers.add_parser("repl", help="Type key presses line by line")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param argv: Arguments, defaults to ``sys.argv[1:]``

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return CliArgs(
            command=args.command,
            expressions=getattr(args, "expressions", None) or [],
            file_path=getattr(args, "file_path", None),
            output=getattr(args, "output", None),
            decimal_places=args.decimal_places,
            verbose=args.verbose,
        )
    except ValidationError as exc:
        parser.error(str(exc))


def run_eval(expressions: List[str], settings: CalculatorSettings, out: TextIO) -> int:
    """
    Print ``expr = result`` for each expression.

    :return: 0 if every expression evaluated, 1 otherwise
    :rtype: int
    """
    status = 0
    for expr in expressions:
        result = ExpressionEvaluator.evaluate(expr)
        if result.ok:
            shown = ExpressionEvaluator.format_result(result.value, settings.decimal_places)
            print(f"{expr}{settings.record_separator}{shown}", file=out)
        else:
            print(f"{expr} -> {settings.error_text}", file=out)
            status = 1
    return status


def run_batch(input_path: Path, output_path: Optional[Path], settings: CalculatorSettings, out: TextIO) -> int:
    """
    Evaluate an operations file into a results file.

    :return: 0 if every expression evaluated, 1 otherwise
    :rtype: int
    """
    runner = BatchRunner(settings=settings)
    if output_path is None:
        output_path = runner.build_output_path(input_path)
    results = runner.run(input_path, output_path)
    print(f"{len(results)} results written to {output_path}", file=out)
    return 0 if all(result.ok for result in results) else 1


def run_repl(settings: CalculatorSettings, stdin: TextIO, out: TextIO) -> int:
    """
    Feed each input line to a calculator session and print the display.

    ``:history`` prints the history log, ``:quit`` exits.

    :return: 0
    :rtype: int
    """
    calculator = Calculator(settings=settings)
    for raw_line in stdin:
        line = raw_line.strip()
        if line == QUIT_COMMAND:
            break
        if line == HISTORY_COMMAND:
            out.write(calculator.history_text())
            continue
        print(calculator.press_sequence(line), file=out)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the ``desk-calculator`` console script.
    """
    cli_args = parse_args(argv)
    configure_logging(logging.DEBUG if cli_args.verbose else logging.WARNING)
    settings = CalculatorSettings(decimal_places=cli_args.decimal_places)

    if cli_args.command == "eval":
        return run_eval(cli_args.expressions, settings, sys.stdout)
    if cli_args.command == "batch":
        try:
            return run_batch(cli_args.file_path, cli_args.output, settings, sys.stdout)
        except ValueError as exc:
            build_parser().error(str(exc))
    return run_repl(settings, sys.stdin, sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
