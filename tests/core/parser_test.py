import unittest

from lox.core import syntax as ast
from lox.core.lexical import lex
from lox.core.parser import Parser, parse


def parse_source(source):
    tokens, lex_errors = lex(source)
    assert not lex_errors, lex_errors
    return parse(tokens)


def messages(errors):
    return [str(error) for error in errors]


class ParserTestCase(unittest.TestCase):

    def test_precedence(self):
        (stmt,), errors = parse_source("1 + 2 * 3;")
        self.assertEqual([], errors)

        expr = stmt.expression
        self.assertIsInstance(expr, ast.Binary)
        self.assertEqual("+", expr.operator.lexeme)
        self.assertIsInstance(expr.right, ast.Binary)
        self.assertEqual("*", expr.right.operator.lexeme)

    def test_grouping_overrides_precedence(self):
        (stmt,), __ = parse_source("(1 + 2) * 3;")

        expr = stmt.expression
        self.assertEqual("*", expr.operator.lexeme)
        self.assertIsInstance(expr.left, ast.Grouping)

    def test_left_associative(self):
        (stmt,), __ = parse_source("1 - 2 - 3;")

        expr = stmt.expression
        self.assertIsInstance(expr.left, ast.Binary)
        self.assertEqual(3.0, expr.right.value)

    def test_assignment_is_right_associative(self):
        (stmt,), __ = parse_source("a = b = 1;")

        expr = stmt.expression
        self.assertIsInstance(expr, ast.Assign)
        self.assertEqual("a", expr.name.lexeme)
        self.assertIsInstance(expr.value, ast.Assign)

    def test_logical(self):
        (stmt,), __ = parse_source("a or b and c;")

        expr = stmt.expression
        self.assertIsInstance(expr, ast.Logical)
        self.assertEqual("or", expr.operator.lexeme)
        self.assertEqual("and", expr.right.operator.lexeme)

    def test_call_and_property_chain(self):
        (stmt,), errors = parse_source("a.b(1, 2).c();")
        self.assertEqual([], errors)

        expr = stmt.expression
        self.assertIsInstance(expr, ast.Call)
        self.assertEqual((), expr.arguments)
        self.assertIsInstance(expr.callee, ast.Get)
        self.assertEqual("c", expr.callee.name.lexeme)

        inner = expr.callee.object
        self.assertIsInstance(inner, ast.Call)
        self.assertEqual(2, len(inner.arguments))
        self.assertEqual("b", inner.callee.name.lexeme)

    def test_set_expression(self):
        (stmt,), errors = parse_source("a.b.c = 3;")
        self.assertEqual([], errors)

        expr = stmt.expression
        self.assertIsInstance(expr, ast.Set)
        self.assertEqual("c", expr.name.lexeme)
        self.assertIsInstance(expr.object, ast.Get)

    def test_invalid_assignment_target(self):
        should_fail = ["1 = 2;", "a + b = c;", "(a) = 1;", "a() = 1;"]
        for case in should_fail:
            statements, errors = parse_source(case)
            self.assertEqual(["Invalid assignment target."], [e.message for e in errors], case)
            # not fatal: the statement is still produced
            self.assertEqual(1, len(statements), case)

    def test_declarations(self):
        source = """
        var a;
        var b = 1;
        fun add(x, y) { return x + y; }
        class B < A { init(n) { this.n = n; } get() { return super.get(); } }
        """
        statements, errors = parse_source(source)
        self.assertEqual([], errors)
        self.assertEqual([ast.Var, ast.Var, ast.Function, ast.Class], [type(s) for s in statements])

        var_a, var_b, function, klass = statements
        self.assertIsNone(var_a.initializer)
        self.assertEqual(["x", "y"], [param.lexeme for param in function.params])
        self.assertIsInstance(function.body[0], ast.Return)
        self.assertEqual("A", klass.superclass.name.lexeme)
        self.assertEqual(["init", "get"], [method.name.lexeme for method in klass.methods])

    def test_for_is_desugared(self):
        (stmt,), errors = parse_source("for (var i = 0; i < 3; i = i + 1) print i;")
        self.assertEqual([], errors)

        self.assertIsInstance(stmt, ast.Block)
        initializer, loop = stmt.statements
        self.assertIsInstance(initializer, ast.Var)
        self.assertIsInstance(loop, ast.While)
        body, increment = loop.body.statements
        self.assertIsInstance(body, ast.Print)
        self.assertIsInstance(increment.expression, ast.Assign)

    def test_empty_for_clauses(self):
        (stmt,), errors = parse_source("for (;;) print 1;")
        self.assertEqual([], errors)

        self.assertIsInstance(stmt, ast.While)
        self.assertIs(True, stmt.condition.value)
        self.assertIsInstance(stmt.body, ast.Print)

    def test_error_isolation(self):
        source = "print 1;\nvar = 2;\nprint 3;\nprint (4;\nprint 5;"
        statements, errors = parse_source(source)

        self.assertEqual(
            ["[line 2] Error at '=': Expect variable name.", "[line 4] Error at ';': Expect ')' after expression."],
            messages(errors),
        )
        self.assertEqual([1.0, 3.0, 5.0], [stmt.expression.value for stmt in statements])

    def test_error_inside_block_keeps_rest_of_block(self):
        source = "{ print 1; print ; print 2; }\nprint 3;"
        statements, errors = parse_source(source)

        self.assertEqual(["Expect expression."], [e.message for e in errors])
        block, last = statements
        self.assertEqual([1.0, 2.0], [stmt.expression.value for stmt in block.statements])
        self.assertEqual(3.0, last.expression.value)

    def test_synchronizes_at_keyword(self):
        source = "print (1 + ) class C {}\nprint 2;"
        statements, errors = parse_source(source)

        self.assertEqual(["[line 1] Error at ')': Expect expression."], messages(errors))
        self.assertEqual([ast.Class, ast.Print], [type(s) for s in statements])
        self.assertEqual("C", statements[0].name.lexeme)

    def test_synchronize_skips_offending_token(self):
        source = "var a = 1 var b = 2;\nprint 3;"
        statements, errors = parse_source(source)

        self.assertEqual(["[line 1] Error at 'var': Expect ';' after variable declaration."], messages(errors))
        self.assertEqual([ast.Print], [type(s) for s in statements])

    def test_error_at_end(self):
        __, errors = parse_source("print 1")
        self.assertEqual(["[line 1] Error at end: Expect ';' after value."], messages(errors))

    def test_malformed_declarations(self):
        cases = {
            "class { }": "Expect class name.",
            "class A < { }": "Expect superclass name.",
            "class A ": "Expect '{' before class body.",
            "fun (a) {}": "Expect function name.",
            "fun f a) {}": "Expect '(' after function name.",
            "fun f(a, 1) {}": "Expect parameter name.",
            "fun f(a) print a;": "Expect '{' before function body.",
            "a.;": "Expect property name after '.'.",
            "super;": "Expect '.' after 'super'.",
            "f(1;": "Expect ')' after arguments.",
            "if 1) print 1;": "Expect '(' after 'if'.",
            "while (true print 1;": "Expect ')' after condition.",
            "{ print 1;": "Expect '}' after block.",
        }
        for case, expected in cases.items():
            __, errors = parse_source(case)
            self.assertEqual(expected, errors[0].message, case)

    def test_argument_limit(self):
        args = ", ".join(["1"] * (Parser.MAX_ARGS + 1))
        statements, errors = parse_source(f"f({args});")
        self.assertEqual(["Can't have more than 255 arguments."], [e.message for e in errors])
        self.assertEqual(1, len(statements))

        params = ", ".join(f"p{i}" for i in range(Parser.MAX_ARGS + 1))
        statements, errors = parse_source(f"fun f({params}) {{}}")
        self.assertEqual(["Can't have more than 255 parameters."], [e.message for e in errors])
        self.assertEqual(1, len(statements))

    def test_nodes_hash_by_identity(self):
        (first, second), __ = parse_source("a; a;")
        self.assertNotEqual(first.expression, second.expression)
        self.assertEqual(2, len({first.expression, second.expression}))


if __name__ == '__main__':
    unittest.main()
