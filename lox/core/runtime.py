"""Runtime value model for lox: callables (native functions, closures, classes), instances, and the signal used to
return from a function.

Primitive values map directly onto Python: nil is None, booleans are bool, numbers are float and strings are str.
"""

import time
from abc import ABC, abstractmethod

from lox.core.environment import Environment
from lox.lang.error import LoxRuntimeError


class Return(Exception):
    """Unwinds from a return statement to the enclosing function call. Not an error: it is never reported and is
    caught only by LoxFunction.call.
    """

    def __init__(self, value):
        super().__init__()
        self.value = value


class LoxCallable(ABC):
    """Anything that can be called with (...)."""

    @abstractmethod
    def arity(self):
        """Number of arguments this callable expects."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Calls this callable with already-evaluated arguments. len(arguments) == self.arity() is checked by the
        caller.
        """


class NativeFunction(LoxCallable):
    """Host function exposed to lox code."""

    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(*arguments)

    def __str__(self):
        return "<native fn>"


def clock():
    return time.time()


NATIVES = [NativeFunction("clock", 0, clock)]


class LoxFunction(LoxCallable):
    """Closure over a function declaration. closure is the Environment active where the function was defined."""

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def bind(self, instance):
        """Returns a copy of this method whose environment defines this as instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        try:
            interpreter.execute_block(self.declaration.body, environment)
        except Return as signal:
            if self.is_initializer:
                return self.closure.get_at(0, "this")
            return signal.value

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        return None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"


class LoxClass(LoxCallable):
    """Class value. Calling it constructs a LoxInstance and runs init, if there is one."""

    def __init__(self, name, superclass, methods):
        self.name = name
        self.superclass = superclass
        self.methods = methods  # dict of name: LoxFunction

    def find_method(self, name):
        """Looks up method name on this class, then up the superclass chain. Returns None if it is not found."""
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self):
        initializer = self.find_method("init")
        return initializer.arity() if initializer is not None else 0

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)

        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        return instance

    def __str__(self):
        return self.name


class LoxInstance:

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Fields shadow methods. Methods are bound to this instance before being returned."""
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
