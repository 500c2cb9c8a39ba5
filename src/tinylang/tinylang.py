from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO, Tuple, Union
import argparse
import getpass
import logging
import sys

from tinylang.errors import (NestingTooDeepError, ParseError, SourceLocation, TinylangError,
                             get_source_context)
from tinylang.evaluator import Evaluator
from tinylang.lexer import Lexer
from tinylang.objects import Object
from tinylang.parser import DEFAULT_MAX_DEPTH, Parser
import tinylang.tinylang_ast as ast  # Rename to avoid conflict with Python's ast module

logger = logging.getLogger(__name__)

# Worst case Python frames used per unit of parser/evaluator nesting depth
FRAMES_PER_DEPTH = 4


@dataclass
class InterpreterOptions:
    """Runtime options for tinylang"""
    max_depth: int = DEFAULT_MAX_DEPTH
    debug: bool = False
    dump_ast: bool = False  # Print reconstructed source instead of evaluating
    prompt: str = ">> "


class Interpreter:
    """Main interpreter interface for tinylang"""

    def __init__(self, options: Optional[InterpreterOptions] = None, output: Optional[TextIO] = None):
        self.options = options or InterpreterOptions()
        self.output = output or sys.stdout
        if self.options.debug:
            logging.getLogger("tinylang").setLevel(logging.DEBUG)
        needed = self.options.max_depth * FRAMES_PER_DEPTH + 200
        if sys.getrecursionlimit() < needed:
            logger.debug(f"Raising recursion limit to {needed}")
            sys.setrecursionlimit(needed)

    def parse_str(self, source: str, source_path: str = "<string>") -> Tuple[ast.Program, List[ParseError]]:
        """Parse a string of tinylang code"""
        parser = Parser(Lexer(source), max_depth=self.options.max_depth, file_path=source_path)
        program = parser.parse_program()
        if parser.errors:
            logger.debug(f"{len(parser.errors)} parse error(s) in {source_path}")
        return program, parser.errors

    def evaluate(self, program: ast.Program, source_path: str = "<string>") -> Object:
        return Evaluator(max_depth=self.options.max_depth, file_path=source_path).evaluate(program)

    def run_str(self, source: str, source_path: str = "<string>") -> Optional[Object]:
        """Parse and evaluate a string. Returns None if the source has syntax errors."""
        program, errors = self.parse_str(source, source_path)
        if errors:
            self.report_parse_errors(errors, source_path)
            return None
        if self.options.dump_ast:
            print(str(program), file=self.output)
        return self.evaluate(program, source_path)

    def run_file(self, filepath: Union[str, Path]) -> Optional[Object]:
        """Run a tinylang source file"""
        path = Path(filepath)
        with open(path) as f:
            source = f.read()
        return self.run_str(source, str(path))

    def report_parse_errors(self, errors: List[ParseError], source_path: str):
        for error in errors:
            print(f"\t{error.describe()}", file=self.output)
            if error.location is not None:
                context = get_source_context(source_path, error.location.line, context_lines=0)
                if context:
                    print(context, file=self.output)

    def repl(self, input_stream: TextIO, output_stream: Optional[TextIO] = None):
        """Read one line at a time, evaluate it and print the result"""
        out = output_stream or self.output
        while True:
            out.write(self.options.prompt)
            out.flush()
            line = input_stream.readline()
            if not line:
                return

            try:
                parser = Parser(Lexer(line), max_depth=self.options.max_depth, file_path="<stdin>")
                program = parser.parse_program()
                if parser.errors:
                    print_parser_errors(out, parser.errors)
                    continue
                if self.options.dump_ast:
                    print(str(program), file=out)
                    continue
                result = self.evaluate(program, "<stdin>")
            except NestingTooDeepError as e:
                print(str(e), file=out)
                continue
            print(result.inspect(), file=out)


def print_parser_errors(out: TextIO, errors: List[ParseError]):
    for error in errors:
        out.write(f"\t{error}\n")


def greeting() -> str:
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "there"
    return f"Hello {user}! This is tinylang. Feel free to type in commands"


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point"""
    parser = argparse.ArgumentParser(description="tinylang interpreter")
    parser.add_argument('files', nargs='*', help='Source files to run (starts a REPL when omitted)')
    parser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_DEPTH,
                        help=f'Maximum nesting depth for parsing and evaluation (default: {DEFAULT_MAX_DEPTH})')
    parser.add_argument('--debug', '-g', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--dump-ast', action='store_true',
                        help='Print the parsed program instead of evaluating it')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(name)s - %(levelname)s - %(message)s',
    )

    if args.max_depth < 1:
        parser.error("--max-depth must be at least 1")

    options = InterpreterOptions(
        max_depth=args.max_depth,
        debug=args.debug,
        dump_ast=args.dump_ast,
    )
    interpreter = Interpreter(options)

    if not args.files:
        print(greeting())
        interpreter.repl(sys.stdin, sys.stdout)
        return 0

    status = 0
    for file in args.files:
        try:
            result = interpreter.run_file(file)
        except TinylangError as e:
            print(str(e), file=sys.stderr)
            return 1
        except OSError as e:
            error = TinylangError(
                message=f"Failed to read {file}: {e.strerror}",
                error_type="IOError",
                location=SourceLocation(str(file), 0, 0),
                notes=["Make sure the file exists and is readable"]
            )
            print(str(error), file=sys.stderr)
            return 1
        except Exception as e:
            # Unexpected error - convert to TinylangError with full traceback
            error = TinylangError.from_exception(e, location=SourceLocation(str(file), 1, 1))
            print("Internal Interpreter Error:", file=sys.stderr)
            print(str(error), file=sys.stderr)
            return 1

        if result is None:
            status = 1
        elif not options.dump_ast:
            print(result.inspect())
    return status


if __name__ == "__main__":
    sys.exit(main())
