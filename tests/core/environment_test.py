import unittest

from lox.core.environment import Environment
from lox.core.runtime import LoxClass, LoxFunction, LoxInstance, NativeFunction
from lox.core.tokens import Token, TokenKind
from lox.lang.error import LoxRuntimeError


def name(lexeme):
    return Token(TokenKind.IDENTIFIER, lexeme, None, 1)


class EnvironmentTestCase(unittest.TestCase):

    def test_define_and_get(self):
        env = Environment()
        env.define("a", 1.0)
        env.define("a", 2.0)  # redefinition overwrites
        self.assertEqual(2.0, env.get(name("a")))

    def test_chain_lookup(self):
        outer = Environment()
        outer.define("a", "outer")
        inner = Environment(outer)
        inner.define("b", "inner")

        self.assertEqual("outer", inner.get(name("a")))
        self.assertEqual("inner", inner.get(name("b")))
        self.assertRaises(LoxRuntimeError, outer.get, name("b"))

        inner.assign(name("a"), "changed")
        self.assertEqual("changed", outer.get(name("a")))

    def test_undefined(self):
        env = Environment(Environment())
        should_fail = [lambda: env.get(name("x")), lambda: env.assign(name("x"), 1.0)]
        for case in should_fail:
            with self.assertRaises(LoxRuntimeError) as context:
                case()
            self.assertEqual("Undefined variable 'x'.", context.exception.message)
            self.assertEqual(1, context.exception.line)

    def test_distances(self):
        globals_ = Environment()
        globals_.define("a", "global")
        middle = Environment(globals_)
        middle.define("a", "middle")
        inner = Environment(middle)

        self.assertIs(middle, inner.ancestor(1))
        self.assertIs(globals_, inner.ancestor(2))
        self.assertEqual("middle", inner.get_at(1, "a"))
        self.assertEqual("global", inner.get_at(2, "a"))

        inner.assign_at(2, name("a"), "assigned")
        self.assertEqual("assigned", globals_.get(name("a")))
        self.assertEqual("middle", middle.get(name("a")))


class RuntimeTestCase(unittest.TestCase):

    def test_find_method_walks_superclasses(self):
        method = object()
        base = LoxClass("Base", None, {"m": method})
        derived = LoxClass("Derived", base, {})

        self.assertIs(method, derived.find_method("m"))
        self.assertIsNone(derived.find_method("missing"))
        self.assertEqual(0, derived.arity())

    def test_instance_fields(self):
        instance = LoxInstance(LoxClass("Thing", None, {}))
        instance.set(name("x"), 1.0)

        self.assertEqual(1.0, instance.get(name("x")))
        self.assertRaises(LoxRuntimeError, instance.get, name("y"))
        self.assertEqual("Thing instance", str(instance))

    def test_bind_defines_this(self):
        closure = Environment()
        function = LoxFunction(declaration=None, closure=closure)
        instance = LoxInstance(LoxClass("Thing", None, {}))

        bound = function.bind(instance)
        self.assertIs(instance, bound.closure.get_at(0, "this"))
        self.assertIs(closure, bound.closure.enclosing)

    def test_native_function(self):
        native = NativeFunction("double", 1, lambda x: x * 2)
        self.assertEqual(1, native.arity())
        self.assertEqual(4.0, native.call(None, [2.0]))
        self.assertEqual("<native fn>", str(native))


if __name__ == '__main__':
    unittest.main()
