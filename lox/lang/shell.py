"""Handles interactive/command-line mode for the lox interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lox interpreter shell."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Executes arbitrary lox source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            try:
                self.sess.add(line)
            finally:
                self.sess.error_handler.reset()  # a bad line shouldn't poison the next one

    def do_help(self, arg):
        """Doesn't return docs, but rather a short intro."""
        print("Welcome to the lox interpreter!\n\n"
              "Lox is a small dynamically-typed language with closures and classes. Statements \n"
              "end with ';'. Type an expression without a ';' to see its value.\n\n"
              "Try it out by typing 'var greeting = \"hello\";', then 'greeting + \" world\"'.\n"
              "Entries with unclosed braces or parentheses continue on the next line.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        if self._tmp_line:
            self.default("")
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
