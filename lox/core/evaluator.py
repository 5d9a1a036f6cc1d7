"""Tree-walking evaluator for lox.

The Interpreter is created once and reused: top-level definitions made by one interpret() call stay visible to the
next, which is what lets an interactive session build a program up one input at a time.

Statement execution returns None when the statement completes normally, or a Returned when a `return` ran somewhere
inside it. Every executor that runs nested statements passes a Returned straight up, so it reaches the enclosing
function call without using exceptions. Exceptions are reserved for errors (LoxRuntimeError).
"""

import logging
import sys
from typing import Any, Dict, List, Optional, TextIO

from lox.core import syntax as ast
from lox.core.environment import Environment
from lox.core.runtime import NATIVES, LoxCallable, LoxClass, LoxFunction, LoxInstance, Returned
from lox.core.tokens import TokenType
from lox.lang.error import LoxRuntimeError


logger = logging.getLogger(__name__)


def is_truthy(value):
    """nil and false are falsy; everything else (0 and "" included) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a, b):
    """No coercion between types: true != 1, "1" != 1. Callables and instances compare by identity."""
    if a is None or b is None:
        return a is b
    if type(a) is not type(b):
        return False
    if isinstance(a, (bool, float, str)):
        return a == b
    return a is b


def stringify(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return f"{value:.0f}"
        return repr(value)
    return str(value)


class Interpreter:

    def __init__(self, out: Optional[TextIO] = None):
        self.out = out if out is not None else sys.stdout

        self.globals = Environment()
        for native in NATIVES:
            self.globals.define(native.name, native)

        self.environment = self.globals
        self.locals: Dict[ast.Expr, int] = {}

    def resolve(self, table):
        """Adds a resolver pass's table. Tables accumulate: earlier ASTs can still be running (via closures)."""
        self.locals.update(table)

    def interpret(self, statements: List[ast.Stmt]):
        """Executes statements in order. A LoxRuntimeError aborts the rest of them and propagates to the caller; the
        interpreter is left in a usable state (current environment back at globals).
        """
        try:
            for stmt in statements:
                self.execute(stmt)
        finally:
            self.environment = self.globals

    # -- statements ---------------------------------------------------------------------------------------------------

    def execute(self, stmt) -> Optional[Returned]:
        match stmt:
            case ast.Expression(expression):
                self.evaluate(expression)

            case ast.Print(expression):
                print(stringify(self.evaluate(expression)), file=self.out)

            case ast.Var(name, initializer):
                value = None
                if initializer is not None:
                    value = self.evaluate(initializer)
                self.environment.define(name.lexeme, value)

            case ast.Block(statements):
                return self.execute_block(statements, Environment(self.environment))

            case ast.If(condition, then_branch, else_branch):
                if is_truthy(self.evaluate(condition)):
                    return self.execute(then_branch)
                if else_branch is not None:
                    return self.execute(else_branch)

            case ast.While(condition, body):
                while is_truthy(self.evaluate(condition)):
                    outcome = self.execute(body)
                    if outcome is not None:
                        return outcome

            case ast.Function(name):
                function = LoxFunction(stmt, self.environment)
                self.environment.define(name.lexeme, function)
                logger.debug("function %s closes over %r", name.lexeme, self.environment)

            case ast.Return(_, value):
                return Returned(self.evaluate(value) if value is not None else None)

            case ast.Class():
                self._execute_class(stmt)

            case _:
                raise TypeError(f"unknown statement node {type(stmt).__name__}")

        return None

    def execute_block(self, statements, environment) -> Optional[Returned]:
        """Runs statements in environment, restoring the current environment on every exit path."""
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                outcome = self.execute(stmt)
                if outcome is not None:
                    return outcome
            return None
        finally:
            self.environment = previous

    def _execute_class(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        enclosing = self.environment
        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods = {}
        for method in stmt.methods:
            is_initializer = method.name.lexeme == LoxClass.INITIALIZER
            methods[method.name.lexeme] = LoxFunction(method, self.environment, is_initializer)

        klass = LoxClass(stmt.name.lexeme, superclass, methods)

        self.environment = enclosing
        self.environment.assign(stmt.name, klass)

    # -- expressions --------------------------------------------------------------------------------------------------

    def evaluate(self, expr) -> Any:
        match expr:
            case ast.Literal(value):
                return value

            case ast.Grouping(expression):
                return self.evaluate(expression)

            case ast.Unary(operator, right):
                return self._unary(operator, self.evaluate(right))

            case ast.Binary(left, operator, right):
                return self._binary(operator, self.evaluate(left), self.evaluate(right))

            case ast.Logical(left, operator, right):
                value = self.evaluate(left)
                if operator.type is TokenType.OR:
                    if is_truthy(value):
                        return value
                elif not is_truthy(value):
                    return value
                return self.evaluate(right)

            case ast.Variable(name):
                return self._look_up_variable(name, expr)

            case ast.Assign(name, value_expr):
                value = self.evaluate(value_expr)
                distance = self.locals.get(expr)
                if distance is not None:
                    self.environment.assign_at(distance, name, value)
                else:
                    self.globals.assign(name, value)
                return value

            case ast.Call(callee_expr, paren, argument_exprs):
                callee = self.evaluate(callee_expr)
                arguments = [self.evaluate(argument) for argument in argument_exprs]
                return self._call(callee, paren, arguments)

            case ast.Get(object_expr, name):
                obj = self.evaluate(object_expr)
                if isinstance(obj, LoxInstance):
                    return obj.get(name)
                raise LoxRuntimeError(name, "Only instances have properties.")

            case ast.Set(object_expr, name, value_expr):
                obj = self.evaluate(object_expr)
                if not isinstance(obj, LoxInstance):
                    raise LoxRuntimeError(name, "Only instances have fields.")
                value = self.evaluate(value_expr)
                obj.set(name, value)
                return value

            case ast.This(keyword):
                return self._look_up_variable(keyword, expr)

            case ast.Super(_, method_name):
                return self._super(expr, method_name)

            case _:
                raise TypeError(f"unknown expression node {type(expr).__name__}")

    def _look_up_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def _call(self, callee, paren, arguments):
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity():
            raise LoxRuntimeError(paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        return callee.call(self, arguments)

    def _super(self, expr, method_name):
        """`super` is bound in the environment just outside the method's `this` environment, to the superclass of the
        class the method was written in. The instance's own class plays no part in the lookup.
        """
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, "super")
        instance = self.environment.get_at(distance - 1, "this")

        method = superclass.find_method(method_name.lexeme)
        if method is None:
            raise LoxRuntimeError(method_name, f"Undefined property '{method_name.lexeme}'.")
        return method.bind(instance)

    @staticmethod
    def _unary(operator, right):
        if operator.type is TokenType.BANG:
            return not is_truthy(right)

        # MINUS
        _check_number_operand(operator, right)
        return -right

    @staticmethod
    def _binary(operator, left, right):
        kind = operator.type

        if kind is TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if kind is TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if kind is TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

        _check_number_operands(operator, left, right)

        if kind is TokenType.MINUS:
            return left - right
        if kind is TokenType.STAR:
            return left * right
        if kind is TokenType.SLASH:
            if right == 0:
                raise LoxRuntimeError(operator, "Division by zero.")
            return left / right
        if kind is TokenType.GREATER:
            return left > right
        if kind is TokenType.GREATER_EQUAL:
            return left >= right
        if kind is TokenType.LESS:
            return left < right
        if kind is TokenType.LESS_EQUAL:
            return left <= right

        raise LoxRuntimeError(operator, f"Unknown operator '{operator.lexeme}'.")


def _check_number_operand(operator, operand):
    if not isinstance(operand, float):
        raise LoxRuntimeError(operator, "Operand must be a number.")


def _check_number_operands(operator, left, right):
    if not isinstance(left, float) or not isinstance(right, float):
        raise LoxRuntimeError(operator, "Operands must be numbers.")
