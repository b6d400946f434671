"""
Tilde CLI Entrypoint.

Command-line harness around the Tilde parser: reads a `.tilde` file (or an
inline string), parses it and prints the AST as JSON.

Features:
    - Read source from `.tilde` files or inline strings.
    - Print the AST as indented or compact JSON, to stdout or a file.
    - Dump the token stream instead of the AST.
    - Launch an interactive REPL.

Example usage:
    tilde app.tilde
    tilde -s "let answer = 42" --compact
    tilde app.tilde --tokens
    tilde --repl

Configuration:
    TILDE_LOG_LEVEL: default for `--log-level` (WARNING if unset).

Functions:
    run_tilde(source: str, is_string: bool = False, indent: int | None = 2,
              tokens: bool = False, out: str | None = None) -> int:
        Parses the source and writes the result; returns the exit status.

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import logging
import os
import sys

from tilde.tilde_errors import TildeError
from tilde.tilde_lexer import Token, tokenize
from tilde.tilde_parser import Parser

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "TILDE_LOG_LEVEL"
SOURCE_SUFFIX = ".tilde"


def format_token(tok: Token) -> str:
    """One line of the `--tokens` listing."""
    return f"{tok.line}:{tok.column}\t{tok.category}\t{tok.subkind}\t{tok.raw}"


def run_tilde(
    source: str,
    is_string: bool = False,
    indent: int | None = 2,
    tokens: bool = False,
    out: str | None = None,
) -> int:
    """
    Parse Tilde source and write its AST (or token stream).

    Args:
        source (str): Tilde source code, or a path to a `.tilde` file.
        is_string (bool): If True, treats `source` as code instead of a path.
        indent (int | None): JSON indentation; None for compact output.
        tokens (bool): If True, prints the token stream instead of the AST.
        out (str | None): Optional path to write the output to instead of stdout.

    Returns:
        int: 0 on success, 1 if the source failed to lex or parse.

    Raises:
        ValueError: If `is_string` is False and the path does not end with `.tilde`.
    """
    if not is_string and not source.endswith(SOURCE_SUFFIX):
        raise ValueError(f"Only {SOURCE_SUFFIX} files are supported.")
    if not is_string:
        logger.info("Reading %s", source)
        with open(source, encoding="utf-8") as f:
            source = f.read()

    try:
        if tokens:
            text = "\n".join(format_token(tok) for tok in tokenize(source))
        else:
            ast = Parser().parse(source)
            text = json.dumps(ast.to_dict(), indent=indent)
    except TildeError as e:
        print(e.message, file=sys.stderr)
        return 1

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.info("Wrote %s", out)
    else:
        print(text)
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the Tilde CLI.

    - Launches the REPL if no source is given or `--repl` is specified.
    - Otherwise parses the source and prints the AST (or tokens).

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--indent N`: JSON indentation (default 2).
        - `--compact`: Single-line JSON.
        - `--tokens`: Print the token stream instead of the AST.
        - `-o`, `--out`: Write output to a file.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Show tokens in the REPL.
        - `--log-level`: Logging threshold (default from TILDE_LOG_LEVEL).
    """
    parser = argparse.ArgumentParser(prog="tilde")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--indent", type=int, default=2, help="JSON indentation (default: 2)"
    )
    parser.add_argument(
        "--compact", action="store_true", help="Print the AST on a single line"
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Print tokens instead of the AST"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL instead of parsing"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Verbose REPL mode (if --repl)"
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default=os.getenv(LOG_LEVEL_ENV, "WARNING").upper(),
        help=f"Logging threshold (default: ${LOG_LEVEL_ENV} or WARNING)",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level, format="%(levelname)s %(name)s: %(message)s"
    )
    indent = None if args.compact else args.indent

    if args.repl or args.source is None:
        from tilde.tilde_repl import start_repl

        start_repl(indent=indent, verbose=args.verbose)
        return 0

    try:
        return run_tilde(
            source=args.source,
            is_string=args.string,
            indent=indent,
            tokens=args.tokens,
            out=args.out,
        )
    except (OSError, ValueError) as e:
        print(f"tilde: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
