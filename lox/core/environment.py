"""Runtime variable storage. Environments form a chain from the innermost block/call up to the globals.

An environment may outlive the block or call that created it: any closure defined inside holds a reference to it, so
it stays alive for as long as that closure is reachable.
"""

from typing import Any, Dict, Optional

from lox.lang.error import LoxRuntimeError


class Environment:

    def __init__(self, enclosing: Optional["Environment"] = None):
        self.values: Dict[str, Any] = {}
        self.enclosing = enclosing

    def define(self, name: str, value: Any):
        """Binds name in this environment. Redefinition is allowed (globals may be redeclared)."""
        self.values[name] = value

    def ancestor(self, distance: int) -> "Environment":
        """The environment distance hops up the chain. The resolver guarantees the hops exist."""
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name.lexeme] = value

    def get(self, name):
        """Looks up name (a Token) in this environment only. Used for globals, which the resolver does not track."""
        try:
            return self.values[name.lexeme]
        except KeyError:
            raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.") from None

    def assign(self, name, value):
        if name.lexeme not in self.values:
            raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")
        self.values[name.lexeme] = value

    def __repr__(self):
        depth = 0
        environment = self.enclosing
        while environment is not None:
            depth += 1
            environment = environment.enclosing
        return f"Environment(names={sorted(self.values)}, depth={depth})"
