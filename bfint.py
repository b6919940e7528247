from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from brainfuck import BrainfuckSyntaxError, MismatchedParentheses
from executor import ByteSink, ByteSource, InputExhausted, Settings, interpret

__version__ = "0.1.0"


def release_stdout() -> None:
    """
    Flush stdout, pointing it at devnull if the reader has gone away.

    Otherwise the unflushed bytes fail again at interpreter shutdown.
    """
    try:
        sys.stdout.flush()
    except (OSError, ValueError):
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        os.close(devnull)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bfint", description="Run a brainfuck program.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("file", nargs="?", help="Path to file with brainfuck code")
    source.add_argument("-c", "--code", help="Brainfuck source code")
    parser.add_argument("--strict", action="store_true",
                        help="Reject bytes other than instructions, whitespace and // comments")
    parser.add_argument("--pointer-wrap", choices=("byte", "tape"), default="byte",
                        help="Wrap the data pointer modulo 256 (default) or modulo the tape length")
    parser.add_argument("--eof", choices=("abort", "zero", "unchanged"), default="abort",
                        help="What ',' does when input is exhausted (default: abort)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug information to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None, stdin: Optional[ByteSource] = None,
         stdout: Optional[ByteSink] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)

    if args.code is not None:
        source = args.code.encode("utf-8")
    else:
        try:
            with open(args.file, "rb") as f:
                source = f.read()
        except OSError as e:
            print(f"Cannot read file with path: '{args.file}', error: '{e}'", file=sys.stderr)
            return 1

    settings = Settings(strict=args.strict, pointer_wrap=args.pointer_wrap, on_eof=args.eof)
    try:
        interpret(source, stdout if stdout is not None else sys.stdout.buffer,
                  stdin if stdin is not None else sys.stdin.buffer, settings)
    except (BrainfuckSyntaxError, MismatchedParentheses) as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        return 2
    except InputExhausted as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        return 1
    finally:
        if stdout is None:
            release_stdout()
    return 0


if __name__ == "__main__":
    sys.exit(main())
