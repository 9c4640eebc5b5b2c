"""Static resolution pass. Walks the whole tree once before it runs and computes, for every variable reference,
assignment, this and super, how many environments separate the use from its definition.

The resulting side table is keyed by node identity. A node missing from it is a global and is looked up dynamically.
The pass also reports static faults that need no runtime values: duplicate locals, reading a local in its own
initializer, return/this/super in the wrong place, and classes inheriting from themselves.
"""

from enum import Enum, auto
from typing import Dict, List

from lox.core import ast


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:

    def __init__(self, error_handler):
        self.error_handler = error_handler

        self.scopes: List[Dict[str, bool]] = []  # innermost last; name: whether its initializer has completed
        self.locals: Dict[ast.Expr, int] = {}

        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements) -> Dict[ast.Expr, int]:
        """Resolves statements and returns the side table of expr: distance."""
        for statement in statements:
            statement.accept(self)
        return self.locals

    def _resolve(self, node):
        node.accept(self)

    # --- scopes ---

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error_handler.token_error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr, name):
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = depth
                return
        # not found: global

    def resolve_function(self, function, kind):
        enclosing_function = self.current_function
        self.current_function = kind

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        for statement in function.body:
            self._resolve(statement)
        self.end_scope()

        self.current_function = enclosing_function

    # --- statements ---

    def visit_block_stmt(self, stmt):
        self.begin_scope()
        for statement in stmt.statements:
            self._resolve(statement)
        self.end_scope()

    def visit_class_stmt(self, stmt):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.name.lexeme == stmt.superclass.name.lexeme:
                self.error_handler.token_error(stmt.superclass.name, "A class can't inherit from itself.")

            self.current_class = ClassType.SUBCLASS
            self._resolve(stmt.superclass)

            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True

        for method in stmt.methods:
            kind = FunctionType.INITIALIZER if method.name.lexeme == "init" else FunctionType.METHOD
            self.resolve_function(method, kind)

        self.end_scope()

        if stmt.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def visit_expression_stmt(self, stmt):
        self._resolve(stmt.expression)

    def visit_function_stmt(self, stmt):
        # defined before the body so the function can refer to itself
        self.declare(stmt.name)
        self.define(stmt.name)
        self.resolve_function(stmt, FunctionType.FUNCTION)

    def visit_if_stmt(self, stmt):
        self._resolve(stmt.condition)
        self._resolve(stmt.then_branch)
        if stmt.else_branch is not None:
            self._resolve(stmt.else_branch)

    def visit_print_stmt(self, stmt):
        self._resolve(stmt.expression)

    def visit_return_stmt(self, stmt):
        if self.current_function is FunctionType.NONE:
            self.error_handler.token_error(stmt.keyword, "Can't return from top-level code.")

        if stmt.value is not None:
            if self.current_function is FunctionType.INITIALIZER:
                self.error_handler.token_error(stmt.keyword, "Can't return a value from an initializer.")
            self._resolve(stmt.value)

    def visit_var_stmt(self, stmt):
        self.declare(stmt.name)
        if stmt.initializer is not None:
            self._resolve(stmt.initializer)
        self.define(stmt.name)

    def visit_while_stmt(self, stmt):
        self._resolve(stmt.condition)
        self._resolve(stmt.body)

    # --- expressions ---

    def visit_assign_expr(self, expr):
        self._resolve(expr.value)
        self.resolve_local(expr, expr.name)

    def visit_binary_expr(self, expr):
        self._resolve(expr.left)
        self._resolve(expr.right)

    def visit_call_expr(self, expr):
        self._resolve(expr.callee)
        for argument in expr.arguments:
            self._resolve(argument)

    def visit_get_expr(self, expr):
        self._resolve(expr.object)  # property names are looked up dynamically

    def visit_grouping_expr(self, expr):
        self._resolve(expr.expression)

    def visit_literal_expr(self, expr):
        pass

    def visit_logical_expr(self, expr):
        self._resolve(expr.left)
        self._resolve(expr.right)

    def visit_set_expr(self, expr):
        self._resolve(expr.value)
        self._resolve(expr.object)

    def visit_super_expr(self, expr):
        if self.current_class is ClassType.NONE:
            self.error_handler.token_error(expr.keyword, "Can't use 'super' outside of a class.")
        elif self.current_class is not ClassType.SUBCLASS:
            self.error_handler.token_error(expr.keyword, "Can't use 'super' in a class with no superclass.")

        self.resolve_local(expr, expr.keyword)

    def visit_this_expr(self, expr):
        if self.current_class is ClassType.NONE:
            self.error_handler.token_error(expr.keyword, "Can't use 'this' outside of a class.")
            return

        self.resolve_local(expr, expr.keyword)

    def visit_unary_expr(self, expr):
        self._resolve(expr.right)

    def visit_variable_expr(self, expr):
        if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
            self.error_handler.token_error(expr.name, "Can't read local variable in its own initializer.")

        self.resolve_local(expr, expr.name)
