import io
import unittest

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.output = []
        self.sess = Session(ErrorHandler(io.StringIO()), Session.SH_FILE, cmd_line=True, output=self.output.append)
        self.shell = Shell(self.sess, stdout=io.StringIO())

    def test_echo(self):
        self.shell.onecmd("1 + 2")
        self.shell.onecmd('var a = "lox";')
        self.shell.onecmd("a")
        self.assertEqual(["3", "lox"], self.output)

    def test_continuation(self):
        self.shell.onecmd("fun add(a, b) {")
        self.assertEqual(self.shell.secondary_prompt, self.shell.prompt)

        self.shell.onecmd("return a + b;")
        self.shell.onecmd("}")
        self.assertEqual("> ", self.shell.prompt)

        self.shell.onecmd("add(1, 2)")
        self.assertEqual(["3"], self.output)

    def test_empty_line_continues_entry(self):
        self.shell.onecmd("print (1 +")
        self.shell.emptyline()
        self.shell.onecmd("2);")
        self.assertEqual(["3"], self.output)

    def test_errors_do_not_poison_session(self):
        should_fail = ["print ;", "{ var a = a; }", "undefined_name", "1 / 0"]
        for case in should_fail:
            self.shell.onecmd(case)
            self.assertFalse(self.sess.error_handler.had_error, case)

        self.shell.onecmd("print 1;")
        self.assertEqual(["1"], self.output)

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))


if __name__ == '__main__':
    unittest.main()
