import io
import unittest

from lox.core import ast
from lox.core.parser import Parser
from lox.core.resolver import Resolver
from lox.core.scanner import Scanner
from lox.lang.error import ErrorHandler


def resolve(source):
    error_handler = ErrorHandler(io.StringIO())
    statements = Parser(Scanner(source, error_handler).scan_tokens(), error_handler).parse()
    assert not error_handler.had_error, error_handler.errors
    return statements, Resolver(error_handler).resolve(statements), error_handler


def distances(locals_, kind):
    """Resolved distances of every node of type kind, in resolution order."""
    found = [(expr, distance) for expr, distance in locals_.items() if isinstance(expr, kind)]
    return [distance for __, distance in found]


class ResolverTestCase(unittest.TestCase):

    def test_globals_are_unresolved(self):
        __, locals_, error_handler = resolve("var a = 1; print a; a = 2;")
        self.assertEqual({}, locals_)
        self.assertFalse(error_handler.had_error)

    def test_block_distances(self):
        statements, locals_, __ = resolve("{ var a = 1; { var b = 2; print a; print b; } }")
        outer, = statements
        inner = outer.statements[1]
        print_a, print_b = inner.statements[1:]

        self.assertEqual(1, locals_[print_a.expression])
        self.assertEqual(0, locals_[print_b.expression])

    def test_identical_references_resolve_independently(self):
        statements, locals_, __ = resolve("var a = 1; { print a; var a = 2; print a; }")
        block = statements[1]
        first, __, second = block.statements

        self.assertNotIn(first.expression, locals_)  # global at this point
        self.assertEqual(0, locals_[second.expression])

    def test_closure_distances(self):
        source = """
        fun outer() {
          var x = 1;
          fun inner() { x = x + 1; return x; }
          return inner;
        }
        """
        __, locals_, __ = resolve(source)
        self.assertEqual([1], distances(locals_, ast.Assign))
        self.assertEqual([1, 1, 0], sorted(distances(locals_, ast.Variable), reverse=True))

    def test_parameters_are_local(self):
        statements, locals_, __ = resolve("fun f(a) { return a; }")
        ret, = statements[0].body
        self.assertEqual(0, locals_[ret.value])

    def test_this_and_super(self):
        source = """
        class A { m() { return this; } }
        class B < A { m() { return super.m(); } }
        """
        __, locals_, error_handler = resolve(source)
        self.assertFalse(error_handler.had_error)
        self.assertEqual([1], distances(locals_, ast.This))
        self.assertEqual([2], distances(locals_, ast.Super))

    def test_static_errors(self):
        should_fail = {
            "{ var a = a; }": "Can't read local variable in its own initializer.",
            "{ var a = 1; var a = 2; }": "Already a variable with this name in this scope.",
            "fun f(a, a) {}": "Already a variable with this name in this scope.",
            "return 1;": "Can't return from top-level code.",
            "class A { init() { return 1; } }": "Can't return a value from an initializer.",
            "class A < A {}": "A class can't inherit from itself.",
            "print this;": "Can't use 'this' outside of a class.",
            "fun f() { return this; }": "Can't use 'this' outside of a class.",
            "print super.m;": "Can't use 'super' outside of a class.",
            "class A { m() { return super.m(); } }": "Can't use 'super' in a class with no superclass.",
        }
        for case, message in should_fail.items():
            __, __, error_handler = resolve(case)
            self.assertEqual([message], [msg for __, msg in error_handler.errors], case)

    def test_allowed(self):
        should_pass = [
            "var a = 1; var a = 2;",                       # globals may be redeclared
            "var a = a;",                                  # global self-reference is a runtime matter
            "class A { init() { return; } }",              # bare return from an initializer
            "class A { make() { return A(); } }",          # class can refer to itself
            "fun f() { return f; }",                       # function can refer to itself
            "{ var a = 1; { var b = a; } }",
        ]
        for case in should_pass:
            __, __, error_handler = resolve(case)
            self.assertFalse(error_handler.had_error, case)


if __name__ == '__main__':
    unittest.main()
