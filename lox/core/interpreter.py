"""Tree-walking evaluator for resolved lox programs.

Variables found in the resolver's side table are read at exactly the recorded distance from the current environment;
anything else is a global. A runtime fault stops the current interpret() call and is reported once.
"""

import math
import sys
from decimal import Decimal

from lox.core import ast
from lox.core.environment import Environment
from lox.core.runtime import NATIVES, LoxCallable, LoxClass, LoxFunction, LoxInstance, Return
from lox.core.tokens import TokenKind
from lox.lang.error import LoxRuntimeError

RECURSION_LIMIT = 50000  # each lox call takes roughly a dozen python frames


def is_truthy(value):
    """nil and false are falsy, everything else (including 0) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_number(value):
    return isinstance(value, float)


def is_equal(a, b):
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    if type(a) is not type(b):  # True == 1.0 in Python, but not in lox
        return False
    return a == b


def stringify(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = format_number(value)
        if text.endswith(".0"):
            text = text[:-2]
        return text
    return str(value)


def format_number(value):
    """Formats a float the way jlox's Double.toString does: plain decimal for magnitudes in [1e-3, 1e7), otherwise
    scientific notation such as 1.0E16 or 2.5E-4.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    magnitude = abs(value)
    if magnitude == 0 or 1e-3 <= magnitude < 1e7:
        return repr(value)

    __, digits, exponent = Decimal(repr(magnitude)).normalize().as_tuple()
    digits = "".join(map(str, digits))
    mantissa = digits[0] + "." + (digits[1:] or "0")
    return f"{'-' if value < 0 else ''}{mantissa}E{len(digits) - 1 + exponent}"


class Interpreter:
    """Executes statements against a persistent global environment. output is called with one line of text for every
    print statement and REPL echo.
    """

    def __init__(self, error_handler, output=print):
        self.error_handler = error_handler
        self.output = output

        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}  # resolved expr: distance

        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)

        for native in NATIVES:
            self.globals.define(native.name, native)

    def resolve(self, locals_):
        """Registers a side table produced by the Resolver."""
        self.locals.update(locals_)

    def interpret(self, statements):
        """Executes statements in order. The first runtime fault is reported and the rest are skipped."""
        try:
            for statement in statements:
                self.execute(statement)
        except LoxRuntimeError as error:
            self.error_handler.runtime_error(error)
        except RecursionError:
            self.environment = self.globals
            self.error_handler.runtime_error(LoxRuntimeError(None, "Stack overflow."))

    def interpret_expression(self, expr):
        """Evaluates expr and echoes its value. Returns the value, or None if a runtime fault occurred."""
        try:
            value = self.evaluate(expr)
        except LoxRuntimeError as error:
            self.error_handler.runtime_error(error)
            return None
        except RecursionError:
            self.environment = self.globals
            self.error_handler.runtime_error(LoxRuntimeError(None, "Stack overflow."))
            return None

        self.output(stringify(value))
        return value

    def evaluate(self, expr):
        return expr.accept(self)

    def execute(self, stmt):
        stmt.accept(self)

    def execute_block(self, statements, environment):
        """Runs statements in environment, restoring the current environment however the block exits."""
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                self.execute(statement)
        finally:
            self.environment = previous

    def look_up_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    # --- statements ---

    def visit_block_stmt(self, stmt):
        self.execute_block(stmt.statements, Environment(self.environment))

    def visit_class_stmt(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        # placeholder so methods can refer to the class being defined
        self.environment.define(stmt.name.lexeme, None)

        environment = self.environment
        if superclass is not None:
            environment = Environment(self.environment)
            environment.define("super", superclass)

        methods = {}
        for method in stmt.methods:
            methods[method.name.lexeme] = LoxFunction(method, environment, method.name.lexeme == "init")

        klass = LoxClass(stmt.name.lexeme, superclass, methods)
        self.environment.assign(stmt.name, klass)

    def visit_expression_stmt(self, stmt):
        self.evaluate(stmt.expression)

    def visit_function_stmt(self, stmt):
        self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))

    def visit_if_stmt(self, stmt):
        if is_truthy(self.evaluate(stmt.condition)):
            self.execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            self.execute(stmt.else_branch)

    def visit_print_stmt(self, stmt):
        self.output(stringify(self.evaluate(stmt.expression)))

    def visit_return_stmt(self, stmt):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        raise Return(value)

    def visit_var_stmt(self, stmt):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value)

    def visit_while_stmt(self, stmt):
        while is_truthy(self.evaluate(stmt.condition)):
            self.execute(stmt.body)

    # --- expressions ---

    def visit_assign_expr(self, expr):
        value = self.evaluate(expr.value)

        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name, value)
        else:
            self.globals.assign(expr.name, value)

        return value

    def visit_binary_expr(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        kind = expr.operator.kind

        if kind is TokenKind.EQUAL_EQUAL:
            return is_equal(left, right)
        if kind is TokenKind.BANG_EQUAL:
            return not is_equal(left, right)

        if kind is TokenKind.PLUS:
            if is_number(left) and is_number(right):
                return left + right
            if isinstance(left, str) or isinstance(right, str):
                return stringify(left) + stringify(right)
            raise LoxRuntimeError(expr.operator,
                                  "Operands must be two numbers or at least one string for concatenation.")

        self.check_number_operands(expr.operator, left, right)

        if kind is TokenKind.GREATER:
            return left > right
        if kind is TokenKind.GREATER_EQUAL:
            return left >= right
        if kind is TokenKind.LESS:
            return left < right
        if kind is TokenKind.LESS_EQUAL:
            return left <= right
        if kind is TokenKind.MINUS:
            return left - right
        if kind is TokenKind.STAR:
            return left * right
        if kind is TokenKind.SLASH:
            if right == 0.0:
                raise LoxRuntimeError(expr.operator, "Division by zero.")
            return left / right

        raise LoxRuntimeError(expr.operator, f"Unknown operator '{expr.operator.lexeme}'.")

    def visit_call_expr(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        return callee.call(self, arguments)

    def visit_get_expr(self, expr):
        obj = self.evaluate(expr.object)
        if isinstance(obj, LoxInstance):
            return obj.get(expr.name)

        raise LoxRuntimeError(expr.name, "Only instances have properties.")

    def visit_grouping_expr(self, expr):
        return self.evaluate(expr.expression)

    def visit_literal_expr(self, expr):
        return expr.value

    def visit_logical_expr(self, expr):
        left = self.evaluate(expr.left)

        if expr.operator.kind is TokenKind.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def visit_set_expr(self, expr):
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError(expr.name, "Only instances have fields.")

        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def visit_super_expr(self, expr):
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, "super")
        instance = self.environment.get_at(distance - 1, "this")  # "this" is always one scope inside "super"

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")

        return method.bind(instance)

    def visit_this_expr(self, expr):
        return self.look_up_variable(expr.keyword, expr)

    def visit_unary_expr(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.kind is TokenKind.BANG:
            return not is_truthy(right)

        self.check_number_operand(expr.operator, right)
        return -right

    def visit_variable_expr(self, expr):
        return self.look_up_variable(expr.name, expr)

    @staticmethod
    def check_number_operand(operator, operand):
        if not is_number(operand):
            raise LoxRuntimeError(operator, "Operand must be a number.")

    @staticmethod
    def check_number_operands(operator, left, right):
        if not (is_number(left) and is_number(right)):
            raise LoxRuntimeError(operator, "Operands must be numbers.")
