"""Session control for the lox language. Runs source text through the whole pipeline (lexer, parser, resolver,
interpreter), either once for a file or repeatedly for an interactive shell.

Basic program flow for one unit of source:
    1. Lexer: source text -> tokens
    2. Parser: tokens -> statements
    3. Resolver: statements -> resolution table (static errors found here too)
    4. Interpreter: executes statements, unless any of 1-3 reported an error
"""

import logging
import sys

from lox.core.evaluator import Interpreter
from lox.core.lexical import Lexer
from lox.core.parser import Parser
from lox.core.resolver import Resolver
from lox.lang.error import ErrorHandler


logger = logging.getLogger(__name__)


class Session:
    """Governs a lox session. One Interpreter lives for the whole session, so globals persist between run() calls."""
    SH_FILE = "<in>"  # name used for the interactive shell
    RECURSION_LIMIT = 10_000  # one lox call costs several host frames

    def __init__(self, path=SH_FILE, out=None, err=None, color=True):
        self.path = path  # used for log messages
        self.out = out if out is not None else sys.stdout

        if sys.getrecursionlimit() < Session.RECURSION_LIMIT:
            sys.setrecursionlimit(Session.RECURSION_LIMIT)

        self.error_handler = ErrorHandler(err, color=color)
        self.interpreter = Interpreter(self.out)

    @property
    def had_error(self):
        """Whether a lex, parse or resolve error was reported since the last reset."""
        return self.error_handler.had_error

    @property
    def had_runtime_error(self):
        return self.error_handler.had_runtime_error

    def reset(self):
        """Clears both error flags. The shell calls this before each input unit."""
        self.error_handler.reset()

    def run(self, source):
        """Runs one unit of source. Errors are reported, never raised; poll had_error/had_runtime_error afterwards."""
        lexer = Lexer(source)
        tokens = lexer.scan_tokens()

        parser = Parser(tokens)
        statements = parser.parse()

        # lex and parse errors are independent: report both before giving up
        self.error_handler.report_all(lexer.errors)
        self.error_handler.report_all(parser.errors)
        logger.debug("%s: %d token(s), %d statement(s)", self.path, len(tokens), len(statements))
        if lexer.errors or parser.errors:
            return

        resolver = Resolver()
        table = resolver.resolve(statements)
        if resolver.errors:
            self.error_handler.report_all(resolver.errors)
            return

        self.interpreter.resolve(table)
        with self.error_handler:
            self.interpreter.interpret(statements)

    def run_file(self, path):
        """Runs the file at path as a single unit. Raises OSError if it cannot be read."""
        self.path = path
        with open(path, "r", encoding="utf-8") as file:
            self.run(file.read())
