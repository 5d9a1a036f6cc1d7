"""Error handling for the lox language. Static errors (lexing, parsing, resolution) are collected by each stage as
LoxSyntaxErrors and reported together; runtime errors are raised as LoxRuntimeErrors and unwind to ErrorHandler. If
any other type of error makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import logging
import sys

from termcolor import colored

from lox.core.tokens import TokenType


logger = logging.getLogger(__name__)


class LoxError(Exception):
    """Any lox diagnostic. Renders as a single line: '[line N] Error<where>: <message>'."""

    def __init__(self, line, message, where=""):
        super().__init__(message)
        self.line = line
        self.message = message
        self.where = where  # e.g. " at 'foo'", " at end", or "" when no token is available

    def __str__(self):
        return f"[line {self.line}] Error{self.where}: {self.message}"


class LoxSyntaxError(LoxError):
    """Static error found while lexing, parsing or resolving. Never raised out of a stage: stages collect these."""

    @classmethod
    def at(cls, token, message):
        """Error located at token."""
        if token.type is TokenType.EOF:
            return cls(token.line, message, " at end")
        return cls(token.line, message, f" at '{token.lexeme}'")

    @classmethod
    def on_line(cls, line, message):
        """Error with no token to point at (only the lexer produces these)."""
        return cls(line, message)


class LoxRuntimeError(LoxError):
    """Error raised during evaluation. Carries the offending token for line reporting."""

    def __init__(self, token, message):
        super().__init__(token.line, message, f" at '{token.lexeme}'")
        self.token = token


class ErrorHandler:
    """Context manager that reports lox errors to the diagnostics stream and records that they happened.

    Static errors are reported with report(); runtime errors are caught on __exit__ and reported with throw(). A
    RecursionError is not a lox error: the host stack is exhausted, so it is reported and the process exits.

    With fatal=True every reported error exits the process: EXIT_STATIC for static errors, EXIT_RUNTIME otherwise.
    """
    ERROR = "red"
    INTERNAL = "magenta"

    EXIT_USAGE = 64
    EXIT_STATIC = 65
    EXIT_RUNTIME = 70

    def __init__(self, stream=None, color=True, fatal=False):
        self.stream = stream if stream is not None else sys.stderr
        self.color = color
        self.fatal = fatal

        self.had_error = False
        self.had_runtime_error = False

    def reset(self):
        """Clears error flags. Called before each interactive input unit."""
        self.had_error = False
        self.had_runtime_error = False

    def _colored(self, text, color=None, attrs=None):
        if not self.color:
            return text
        return colored(text, color, attrs=attrs)

    def _format(self, error, color):
        head = self._colored(f"[line {error.line}]", attrs=["bold"])
        kind = self._colored(f"Error{error.where}:", color, attrs=["bold"])
        return f"{head} {kind} {error.message}"

    def report(self, error):
        """Reports a static error. Execution of the current unit should be skipped afterwards."""
        self.had_error = True
        print(self._format(error, ErrorHandler.ERROR), file=self.stream)

        if self.fatal:
            sys.exit(ErrorHandler.EXIT_STATIC)

    def report_all(self, errors):
        for error in errors:
            self.report(error)

    def throw(self, error):
        """Reports a runtime error."""
        self.had_runtime_error = True
        print(self._format(error, ErrorHandler.ERROR), file=self.stream)

        if self.fatal:
            sys.exit(ErrorHandler.EXIT_RUNTIME)

    def internal(self, msg):
        """Reports an error that is not the program's fault."""
        self.had_runtime_error = True
        print(self._colored("[internal] ", ErrorHandler.INTERNAL, attrs=["bold"]) + msg, file=self.stream)

        if self.fatal:
            sys.exit(ErrorHandler.EXIT_RUNTIME)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or exc_type is SystemExit:
            return False

        if issubclass(exc_type, LoxRuntimeError):
            self.throw(exc_val)
            return True

        if exc_type is KeyboardInterrupt:
            self.internal("keyboard interrupt")
            return True

        if exc_type is RecursionError:
            self.internal("Stack overflow.")
            sys.exit(ErrorHandler.EXIT_RUNTIME)

        logger.debug("unhandled %s escaped to ErrorHandler", exc_type.__name__)
        self.internal(f"unknown error: '{exc_type.__name__}: {exc_val}'")
        return False
