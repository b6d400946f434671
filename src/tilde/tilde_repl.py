"""
Interactive read-parse-print loop for the Tilde language.

Each entry is parsed as a complete program and its AST printed as JSON.
Entries spanning several lines are collected while braces are left open.

Commands:
    exit, quit      Leave the REPL.
    verbose-mode    Toggle printing the token stream before each AST.
"""

import json

from tilde.tilde_errors import TildeError
from tilde.tilde_lexer import tokenize
from tilde.tilde_parser import Parser


def read_entry() -> str | None:
    """Read one entry, continuing while `{` outnumber `}`; None means quit."""
    src_lines: list[str] = []
    brace_count = 0
    while True:
        prompt = ">>> " if not src_lines else "... "
        line = input(prompt)
        if line.strip() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        brace_count += line.count("{") - line.count("}")
        if brace_count <= 0:
            return "\n".join(src_lines).strip()


def start_repl(indent: int | None = 2, verbose: bool = False) -> None:
    print("Tilde REPL. Type 'exit' or 'quit' to leave.")
    parser = Parser()

    while True:
        try:
            src = read_entry()
        except (EOFError, KeyboardInterrupt):
            print()
            src = None
        if src is None:
            print("Exiting Tilde REPL.")
            return
        if not src:
            continue
        if src == "verbose-mode":
            verbose = not verbose
            print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
            continue

        try:
            if verbose:
                for tok in tokenize(src):
                    print(f"[token] >>> {tok.line}:{tok.column} {tok.subkind} {tok.raw}")
            ast = parser.parse(src)
        except TildeError as e:
            print(f"[error] >>> {e.message}")
            continue

        print(json.dumps(ast.to_dict(), indent=indent))


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
