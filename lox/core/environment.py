"""Lexical environments. Each Environment maps names to values and links to the Environment enclosing it; closures
keep the chain they were defined in alive for as long as they are referenced.
"""

from lox.lang.error import LoxRuntimeError


class Environment:

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing  # None only for the global environment

    def define(self, name, value):
        """Binds name in this environment. Redefinition overwrites."""
        self.values[name] = value

    def get(self, name):
        """Looks up token name, walking outward through the chain."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment.values[name.lexeme]
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance):
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Reads name (a str) exactly distance links up the chain, as computed by the resolver."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self):
        names = ", ".join(self.values)
        if self.enclosing is None:
            return f"Environment(globals: {names})"
        return f"Environment({names}) -> {self.enclosing!r}"
