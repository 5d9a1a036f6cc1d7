"""Static scope resolution for lox.

Walks an already-parsed AST once, before it is evaluated, and records for every local variable reference how many
environments away its declaration lives. The interpreter uses that table to look variables up lexically (a closure
always sees the binding that was in scope where it was written, never one declared later in an enclosing block).

Also rejects programs that are syntactically valid but meaningless: reading a local in its own initializer, `return`
at top level, returning a value from init(), `this`/`super` outside a (sub)class, and a class inheriting from itself.
"""

import logging
from enum import Enum, auto
from typing import Dict, List

from lox.core import syntax as ast
from lox.lang.error import LoxSyntaxError


logger = logging.getLogger(__name__)


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    """One resolve pass. resolve() returns the resolution table: {reference node: hops to declaring scope}.

    Global names are never recorded; a reference missing from the table is looked up in the global environment.
    """

    def __init__(self):
        self.locals: Dict[ast.Expr, int] = {}
        self.errors: List[LoxSyntaxError] = []

        self._scopes: List[Dict[str, bool]] = []  # name -> whether its initializer has finished
        self._current_function = FunctionType.NONE
        self._current_class = ClassType.NONE

    def resolve(self, statements):
        self._resolve_all(statements)
        logger.debug("resolved %d local reference(s), %d error(s)", len(self.locals), len(self.errors))
        return self.locals

    def _resolve_all(self, statements):
        for stmt in statements:
            self._resolve_stmt(stmt)

    def _resolve_stmt(self, stmt):
        match stmt:
            case ast.Block(statements):
                self._begin_scope()
                self._resolve_all(statements)
                self._end_scope()

            case ast.Var(name, initializer):
                self._declare(name)
                if initializer is not None:
                    self._resolve_expr(initializer)
                self._define(name)

            case ast.Function(name):
                # defined before the body is resolved so the function can call itself
                self._declare(name)
                self._define(name)
                self._resolve_function(stmt, FunctionType.FUNCTION)

            case ast.Class():
                self._resolve_class(stmt)

            case ast.Expression(expression) | ast.Print(expression):
                self._resolve_expr(expression)

            case ast.If(condition, then_branch, else_branch):
                self._resolve_expr(condition)
                self._resolve_stmt(then_branch)
                if else_branch is not None:
                    self._resolve_stmt(else_branch)

            case ast.While(condition, body):
                self._resolve_expr(condition)
                self._resolve_stmt(body)

            case ast.Return(keyword, value):
                if self._current_function is FunctionType.NONE:
                    self._error(keyword, "Can't return from top-level code.")
                if value is not None:
                    if self._current_function is FunctionType.INITIALIZER:
                        self._error(keyword, "Can't return a value from an initializer.")
                    self._resolve_expr(value)

            case _:
                raise TypeError(f"unknown statement node {type(stmt).__name__}")

    def _resolve_expr(self, expr):
        match expr:
            case ast.Variable(name):
                scope = self._scopes[-1] if self._scopes else {}
                if scope.get(name.lexeme) is False:
                    self._error(name, "Can't read local variable in its own initializer.")
                self._resolve_local(expr, name)

            case ast.Assign(name, value):
                self._resolve_expr(value)
                self._resolve_local(expr, name)

            case ast.Binary(left, _, right) | ast.Logical(left, _, right):
                self._resolve_expr(left)
                self._resolve_expr(right)

            case ast.Unary(_, right):
                self._resolve_expr(right)

            case ast.Grouping(expression):
                self._resolve_expr(expression)

            case ast.Literal():
                pass

            case ast.Call(callee, _, arguments):
                self._resolve_expr(callee)
                for argument in arguments:
                    self._resolve_expr(argument)

            case ast.Get(obj):
                self._resolve_expr(obj)

            case ast.Set(obj, _, value):
                self._resolve_expr(value)
                self._resolve_expr(obj)

            case ast.This(keyword):
                if self._current_class is ClassType.NONE:
                    self._error(keyword, "Can't use 'this' outside of a class.")
                    return
                self._resolve_local(expr, keyword)

            case ast.Super(keyword):
                if self._current_class is ClassType.NONE:
                    self._error(keyword, "Can't use 'super' outside of a class.")
                    return
                if self._current_class is not ClassType.SUBCLASS:
                    self._error(keyword, "Can't use 'super' in a class with no superclass.")
                    return
                self._resolve_local(expr, keyword)

            case _:
                raise TypeError(f"unknown expression node {type(expr).__name__}")

    def _resolve_class(self, stmt):
        enclosing_class = self._current_class
        self._current_class = ClassType.CLASS

        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self._error(stmt.superclass.name, "A class can't inherit from itself.")

            self._current_class = ClassType.SUBCLASS
            self._resolve_expr(stmt.superclass)

            # methods of a subclass close over an extra environment holding `super`
            self._begin_scope()
            self._scopes[-1]["super"] = True

        self._begin_scope()
        self._scopes[-1]["this"] = True

        for method in stmt.methods:
            kind = FunctionType.METHOD
            if method.name.lexeme == "init":
                kind = FunctionType.INITIALIZER
            self._resolve_function(method, kind)

        self._end_scope()
        if stmt.superclass is not None:
            self._end_scope()

        self._current_class = enclosing_class

    def _resolve_function(self, function, kind):
        enclosing_function = self._current_function
        self._current_function = kind

        self._begin_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        self._resolve_all(function.body)
        self._end_scope()

        self._current_function = enclosing_function

    def _resolve_local(self, expr, name):
        """Records hops from the innermost scope to the one declaring name. Leaves globals unrecorded."""
        for distance, scope in enumerate(reversed(self._scopes)):
            if name.lexeme in scope:
                self.locals[expr] = distance
                return

    def _begin_scope(self):
        self._scopes.append({})

    def _end_scope(self):
        self._scopes.pop()

    def _declare(self, name):
        if not self._scopes:
            return

        scope = self._scopes[-1]
        if name.lexeme in scope:
            self._error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def _define(self, name):
        if not self._scopes:
            return
        self._scopes[-1][name.lexeme] = True

    def _error(self, token, message):
        self.errors.append(LoxSyntaxError.at(token, message))


def resolve(statements):
    """Convenience wrapper: returns (resolution table, errors)."""
    resolver = Resolver()
    return resolver.resolve(statements), resolver.errors
