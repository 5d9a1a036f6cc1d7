"""Runtime object model for lox: callables (native functions, user functions, classes) and class instances.

Lox values are represented directly by Python values where possible:

```
nil     -> None
boolean -> bool
number  -> float
string  -> str
```

Everything else is one of the classes below.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from lox.core import syntax as ast
from lox.core.environment import Environment
from lox.lang.error import LoxRuntimeError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Returned:
    """Outcome of a statement that executed a `return`. Statements that complete normally produce None instead.

    Propagated by every statement executor up to the enclosing call, which unwraps value as the call's result.
    """
    value: Any


class LoxCallable(ABC):
    """Anything that can be invoked with a fixed number of arguments."""

    @abstractmethod
    def arity(self) -> int:
        """Exact number of arguments call expects."""

    @abstractmethod
    def call(self, interpreter, arguments: List[Any]) -> Any:
        """Invokes this callable. Assumes the caller has already checked len(arguments) == arity()."""


class NativeFunction(LoxCallable):
    """Callable implemented by the host."""

    def __init__(self, name: str, arity: int, fn: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self.fn = fn

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.fn(*arguments)

    def __str__(self):
        return "<native fn>"

    def __repr__(self):
        return f"NativeFunction({self.name!r}, arity={self._arity})"


def clock():
    """Seconds since the epoch, as a lox number."""
    return float(time.time())


NATIVES = [NativeFunction("clock", 0, clock)]


class LoxFunction(LoxCallable):
    """User-defined function or method: a declaration paired with the environment it was defined in."""

    def __init__(self, declaration: ast.Function, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def bind(self, instance: "LoxInstance") -> "LoxFunction":
        """Returns a copy of this method whose closure has `this` bound to instance. The defining closure (which may
        hold `super`) stays beneath the new environment.
        """
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        outcome = interpreter.execute_block(self.declaration.body, environment)

        # init() always yields the instance, even on an early bare `return;`
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if isinstance(outcome, Returned):
            return outcome.value
        return None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"

    def __repr__(self):
        return f"LoxFunction({self.declaration.name.lexeme!r}, arity={self.arity()})"


class LoxClass(LoxCallable):
    """A class is callable: calling it constructs an instance and runs init(), if any."""
    INITIALIZER = "init"

    def __init__(self, name: str, superclass: Optional["LoxClass"], methods: Dict[str, LoxFunction]):
        self.name = name
        self.superclass = superclass
        self.methods = methods

        logger.debug("class %s created (superclass=%s, methods=%s)",
                     name, superclass.name if superclass else None, sorted(methods))

    def find_method(self, name: str) -> Optional[LoxFunction]:
        """Looks name up in this class, then up the superclass chain."""
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self):
        initializer = self.find_method(LoxClass.INITIALIZER)
        return initializer.arity() if initializer else 0

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)

        initializer = self.find_method(LoxClass.INITIALIZER)
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        return instance

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"LoxClass({self.name!r})"


class LoxInstance:
    """An object created by calling a LoxClass. Fields are per-instance; methods come from the class."""

    def __init__(self, klass: LoxClass):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name):
        """Fields shadow methods. Methods are returned bound to this instance."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"

    def __repr__(self):
        return f"LoxInstance({self.klass.name!r}, fields={sorted(self.fields)})"
