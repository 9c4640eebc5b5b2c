"""Lox interpreter. Runs a .lox script, or starts command-line mode when no script is given.

Basic program flow:
    1. Scanner: source text -> tokens (lox/core/scanner.py)
    2. Parser: tokens -> syntax tree, recovering at statement boundaries after an error (lox/core/parser.py)
    3. Resolver: syntax tree -> side table of scope distances, plus static checks (lox/core/resolver.py)
    4. Interpreter: walks the resolved tree against a chain of environments (lox/core/interpreter.py)

Any error in steps 1-3 stops the source before it runs. Exit status follows jlox: 65 for static errors, 70 for
runtime faults, 66 for an unreadable script.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell


def main(argv=None):
    """Runs lox interpreter. Called from the lox console script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="lox")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--tokens", action="store_true", help="print the scanned tokens before running")
        parser.add_argument("--ast", action="store_true", help="print the syntax tree before running")
        args = parser.parse_args(argv)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False)
        else:
            sess = Session(error_handler, Session.SH_FILE, cmd_line=True)

        sess.show_tokens = args.tokens
        sess.show_ast = args.ast

        if args.file is not None:
            sess.run()
        else:
            Shell(sess).cmdloop()
            return 0

    return error_handler.exit_code()


if __name__ == "__main__":
    sys.exit(main())
