import io
import unittest

from lox.core.tokens import Token, TokenType
from lox.lang.error import ErrorHandler, LoxRuntimeError, LoxSyntaxError


class LoxErrorTestCase(unittest.TestCase):

    def test_syntax_error_location(self):
        cases = {
            LoxSyntaxError.at(Token(TokenType.IDENTIFIER, "foo", None, 3), "Bad."): "[line 3] Error at 'foo': Bad.",
            LoxSyntaxError.at(Token(TokenType.EOF, "", None, 7), "Bad."): "[line 7] Error at end: Bad.",
            LoxSyntaxError.on_line(2, "Unexpected character."): "[line 2] Error: Unexpected character.",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, str(case))

    def test_runtime_error_keeps_token(self):
        token = Token(TokenType.MINUS, "-", None, 5)
        error = LoxRuntimeError(token, "Operand must be a number.")
        self.assertIs(token, error.token)
        self.assertEqual(5, error.line)
        self.assertEqual("[line 5] Error at '-': Operand must be a number.", str(error))


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.handler = ErrorHandler(self.stream, color=False)

    def test_report(self):
        self.handler.report_all([LoxSyntaxError.on_line(1, "one"), LoxSyntaxError.on_line(2, "two")])
        self.assertEqual("[line 1] Error: one\n[line 2] Error: two\n", self.stream.getvalue())
        self.assertTrue(self.handler.had_error)
        self.assertFalse(self.handler.had_runtime_error)

    def test_catches_runtime_errors(self):
        token = Token(TokenType.IDENTIFIER, "x", None, 1)
        with self.handler:
            raise LoxRuntimeError(token, "Undefined variable 'x'.")

        self.assertEqual("[line 1] Error at 'x': Undefined variable 'x'.\n", self.stream.getvalue())
        self.assertTrue(self.handler.had_runtime_error)

        self.handler.reset()
        self.assertFalse(self.handler.had_runtime_error)
        self.assertFalse(self.handler.had_error)

    def test_stack_overflow_is_fatal(self):
        with self.assertRaises(SystemExit) as ctx:
            with self.handler:
                raise RecursionError()

        self.assertEqual(ErrorHandler.EXIT_RUNTIME, ctx.exception.code)
        self.assertIn("Stack overflow.", self.stream.getvalue())

    def test_fatal(self):
        token = Token(TokenType.IDENTIFIER, "x", None, 1)
        cases = {
            ErrorHandler.EXIT_STATIC: lambda handler: handler.report(LoxSyntaxError.on_line(1, "static")),
            ErrorHandler.EXIT_RUNTIME: lambda handler: handler.throw(LoxRuntimeError(token, "runtime")),
        }
        for expected, report in cases.items():
            handler = ErrorHandler(io.StringIO(), color=False, fatal=True)
            with self.assertRaises(SystemExit) as ctx:
                report(handler)
            self.assertEqual(expected, ctx.exception.code)

        stream = io.StringIO()
        handler = ErrorHandler(stream, color=False, fatal=True)
        with self.assertRaises(SystemExit) as ctx:
            with handler:
                raise LoxRuntimeError(token, "Undefined variable 'x'.")
        self.assertEqual(ErrorHandler.EXIT_RUNTIME, ctx.exception.code)
        self.assertEqual("[line 1] Error at 'x': Undefined variable 'x'.\n", stream.getvalue())

    def test_not_fatal_by_default(self):
        self.handler.report(LoxSyntaxError.on_line(1, "static"))
        self.handler.internal("keyboard interrupt")
        self.assertTrue(self.handler.had_error)
        self.assertTrue(self.handler.had_runtime_error)

    def test_unknown_errors_propagate(self):
        with self.assertRaises(ZeroDivisionError):
            with self.handler:
                raise ZeroDivisionError("boom")
        self.assertIn("[internal] unknown error: 'ZeroDivisionError: boom'", self.stream.getvalue())

    def test_color(self):
        handler = ErrorHandler(self.stream, color=True)
        handler.report(LoxSyntaxError.on_line(1, "message"))
        # colors (or their absence, e.g. NO_COLOR) never change the text itself
        self.assertIn("message", self.stream.getvalue())
        self.assertIn("Error:", self.stream.getvalue())


if __name__ == '__main__':
    unittest.main()
