import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO

from lox.lang.error import ErrorHandler
from lox.main import main


class MainTestCase(unittest.TestCase):

    def run_script(self, source):
        """Runs source as a file through main(). Returns (exit code, stdout, stderr)."""
        out, err = StringIO(), StringIO()
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "script.lox")
            with open(path, "w", encoding="utf-8") as file:
                file.write(source)

            code = 0
            with redirect_stdout(out), redirect_stderr(err):
                try:
                    main([path, "--no-color"])
                except SystemExit as exc:
                    code = exc.code
        return code, out.getvalue(), err.getvalue()

    def test_success(self):
        code, out, err = self.run_script("print 1 + 2 * 3;")
        self.assertEqual(0, code)
        self.assertEqual("7\n", out)
        self.assertEqual("", err)

    def test_exit_codes(self):
        cases = {
            "print 1 +;": ErrorHandler.EXIT_STATIC,
            "return;": ErrorHandler.EXIT_STATIC,
            "print 1 / 0;": ErrorHandler.EXIT_RUNTIME,
        }
        for case, expected in cases.items():
            code, __, err = self.run_script(case)
            self.assertEqual(expected, code, case)
            self.assertTrue(err.startswith("[line 1] Error"), case)

    def test_usage(self):
        should_fail = [["a.lox", "b.lox"], ["--bogus"], ["/nonexistent/script.lox"]]
        for case in should_fail:
            with redirect_stderr(StringIO()), self.assertRaises(SystemExit) as ctx:
                main(case)
            self.assertEqual(ErrorHandler.EXIT_USAGE, ctx.exception.code, case)

    def test_invalid_utf8(self):
        err = StringIO()
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "script.lox")
            with open(path, "wb") as file:
                file.write(b'print "\xff";')

            with redirect_stderr(err), self.assertRaises(SystemExit) as ctx:
                main([path, "--no-color"])

        self.assertEqual(ErrorHandler.EXIT_USAGE, ctx.exception.code)
        self.assertIn("not valid UTF-8", err.getvalue())


if __name__ == '__main__':
    unittest.main()
