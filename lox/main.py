"""Runs .lox files, or an interactive shell when no file is given. Installed as the `lox` console script.

Exit codes follow sysexits: 64 for bad usage, 65 when the file has a static (lex/parse/resolve) error, 70 when it
failed at runtime.
"""

import argparse
import logging
import sys

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell


def main(argv=None):
    """Runs lox interpreter. Called from the lox console script."""
    parser = argparse.ArgumentParser(prog="lox")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to interactive mode)", nargs="?")
    parser.add_argument("-v", "--verbose", help="log pipeline internals to stderr", action="store_true")
    parser.add_argument("--no-color", help="print diagnostics without color", action="store_true")

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # argparse exits with 2 on bad usage
        if exc.code:
            sys.exit(ErrorHandler.EXIT_USAGE)
        raise

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.file is not None:
        sess = Session(args.file, color=not args.no_color)
        try:
            sess.run_file(args.file)
        except OSError as exc:
            print(f"lox: cannot open '{args.file}': {exc.strerror}", file=sys.stderr)
            sys.exit(ErrorHandler.EXIT_USAGE)
        except UnicodeDecodeError as exc:
            print(f"lox: cannot read '{args.file}': not valid UTF-8 ({exc.reason})", file=sys.stderr)
            sys.exit(ErrorHandler.EXIT_USAGE)

        if sess.had_error:
            sys.exit(ErrorHandler.EXIT_STATIC)
        if sess.had_runtime_error:
            sys.exit(ErrorHandler.EXIT_RUNTIME)

    else:
        Shell(Session(color=not args.no_color)).cmdloop()


if __name__ == "__main__":
    main()
