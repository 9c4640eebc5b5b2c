import io
import unittest

from lox.core import ast
from lox.core.parser import Parser
from lox.core.printer import AstPrinter
from lox.core.scanner import Scanner
from lox.lang.error import ErrorHandler


def parse(source, repl=False):
    error_handler = ErrorHandler(io.StringIO())
    parser = Parser(Scanner(source, error_handler).scan_tokens(), error_handler)
    if repl:
        return parser.parse_repl(), error_handler
    return parser.parse(), error_handler


def printed(source):
    statements, error_handler = parse(source)
    assert not error_handler.had_error, error_handler.errors
    return AstPrinter().print_program(statements)


class ParserTestCase(unittest.TestCase):

    def test_precedence(self):
        cases = {
            "1 + 2 * 3;": "(; (+ 1 (* 2 3)))",
            "(1 + 2) * 3;": "(; (* (group (+ 1 2)) 3))",
            "1 - 2 - 3;": "(; (- (- 1 2) 3))",
            "-123 * (45.67);": "(; (* (- 123) (group 45.67)))",
            "!!true;": "(; (! (! true)))",
            "1 < 2 == 3 >= 4;": "(; (== (< 1 2) (>= 3 4)))",
            "a or b and c;": "(; (or a (and b c)))",
            "a = b = c;": "(; (= a (= b c)))",
            "a.b.c = d;": "(; (= (. a b) c d))",
            "f(1)(2).x;": "(; (. (call (call f 1) 2) x))",
            "super.m;": "(; (super m))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, printed(case), case)

    def test_statements(self):
        cases = {
            "var a;": "(var a)",
            "var a = nil;": "(var a = nil)",
            'print "hi";': '(print "hi")',
            "{ var a = 1; print a; }": "(block (var a = 1) (print a))",
            "if (a) print 1; else print 2;": "(if-else a (print 1) (print 2))",
            "while (a) a = a - 1;": "(while a (; (= a (- a 1))))",
            "fun add(a, b) { return a + b; }": "(fun add(a b) (return (+ a b)))",
            "class B < A { init() { return; } }": "(class B < A (fun init() (return)))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, printed(case), case)

    def test_dangling_else(self):
        self.assertEqual("(if a (if-else b (print 1) (print 2)))", printed("if (a) if (b) print 1; else print 2;"))

    def test_for_desugaring(self):
        cases = {
            "for (var i = 0; i < 3; i = i + 1) print i;":
                "(block (var i = 0) (while (< i 3) (block (print i) (; (= i (+ i 1))))))",
            "for (;;) print 1;": "(while true (print 1))",
            "for (i = 0; i < 1;) print i;": "(block (; (= i 0)) (while (< i 1) (print i)))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, printed(case), case)

        statements, __ = parse("for (var i = 0; i < 3; i = i + 1) print i;")
        block, = statements
        self.assertIsInstance(block, ast.Block)
        self.assertIsInstance(block.statements[0], ast.Var)
        self.assertIsInstance(block.statements[1], ast.While)

    def test_invalid_assignment_target(self):
        should_fail = ["1 = 2;", "a + b = c;", "(a) = 1;", "this = 1;"]
        for case in should_fail:
            statements, error_handler = parse(case)
            self.assertEqual([(1, "Invalid assignment target.")], error_handler.errors, case)
            self.assertEqual(1, len(statements), case)  # parsing carries on

    def test_synchronization(self):
        source = "var = 1;\nprint ;\nvar ok = 2;\nprint (1;\nprint ok;"
        statements, error_handler = parse(source)

        self.assertEqual([
            (1, "Expect variable name."),
            (2, "Expect expression."),
            (4, "Expect ')' after expression."),
        ], error_handler.errors)
        self.assertEqual(["(var ok = 2)", "(print ok)"], [AstPrinter().print(stmt) for stmt in statements])

    def test_missing_braces(self):
        should_fail = {
            "fun f() { print 1;": "Expect '}' after block.",
            "class A { m() {} ": "Expect '}' after class body.",
            "class A m() {}": "Expect '{' before class body.",
            "fun f() print 1;": "Expect '{' before function body.",
        }
        for case, message in should_fail.items():
            __, error_handler = parse(case)
            self.assertIn(message, [msg for __, msg in error_handler.errors], case)

    def test_argument_limit(self):
        params = ", ".join(f"p{idx}" for idx in range(256))
        statements, error_handler = parse(f"fun f({params}) {{}}")
        self.assertEqual([(1, "Can't have more than 255 parameters.")], error_handler.errors)
        self.assertEqual(256, len(statements[0].params))

        args = ", ".join("1" for __ in range(256))
        __, error_handler = parse(f"f({args});")
        self.assertEqual([(1, "Can't have more than 255 arguments.")], error_handler.errors)

    def test_parse_repl(self):
        cases = {
            "1 + 2": True,
            "a": True,
            "print 1;": False,
            "1 + 2;": False,
            "var a = 1; a;": False,
        }
        for case, echo in cases.items():
            (statements, result), error_handler = parse(case, repl=True)
            self.assertFalse(error_handler.had_error, case)
            self.assertEqual(echo, result, case)

        should_fail = ["{ a }", "var a = 1; a", "print 1; 1 + 2", "if (true) a"]
        for case in should_fail:
            (__, echo), error_handler = parse(case, repl=True)
            self.assertFalse(echo, case)
            self.assertIn("Expect ';' after expression.", [msg for __, msg in error_handler.errors], case)

    def test_nodes_compare_by_identity(self):
        statements, __ = parse("a; a;")
        first, second = (stmt.expression for stmt in statements)
        self.assertNotEqual(first, second)
        self.assertEqual(2, len({first: 0, second: 1}))


if __name__ == '__main__':
    unittest.main()
