"""Session control for the lox language. Runs source through scanning, parsing, resolution and interpretation, either
from a script file or line by line in command-line mode.
"""

from lox.core.interpreter import Interpreter
from lox.core.parser import Parser
from lox.core.printer import AstPrinter
from lox.core.resolver import Resolver
from lox.core.scanner import Scanner
from lox.lang.error import LoxException, SourceError


class Session:
    """Governs a lox session. One interpreter lives for the whole session, so globals defined by one run are visible to
    the next (as they must be in command-line mode).
    """
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, output=print):
        if path == Session.SH_FILE and not cmd_line:
            raise LoxException("'<in>' is a reserved filename")

        self.error_handler = error_handler
        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.output = output      # called with each line of program output

        self.show_tokens = False  # debug: print tokens before running
        self.show_ast = False     # debug: print the syntax tree before running

        self.interpreter = Interpreter(error_handler, output)

    @staticmethod
    def preprocess_line(line, add_to_prev=""):
        """Joins line onto add_to_prev (a pending, unfinished entry) and returns the joined line plus whether another
        line is needed to finish it, i.e. whether braces or parentheses are still open.
        """
        if add_to_prev:
            line = add_to_prev + "\n" + line

        balance = 0
        in_string = False
        idx = 0
        while idx < len(line):
            char = line[idx]
            if char == '"':
                in_string = not in_string
            elif not in_string:
                if line.startswith("//", idx):
                    newline = line.find("\n", idx)
                    idx = len(line) if newline == -1 else newline
                    continue
                if char in "({":
                    balance += 1
                elif char in ")}":
                    balance -= 1
            idx += 1

        return line, balance > 0 or in_string

    def run(self):
        """Runs the script at self.path. Raises SourceError if it can't be read."""
        try:
            with open(self.path, "r", encoding="utf-8") as file:
                source = file.read()
        except (OSError, UnicodeDecodeError):
            raise SourceError(f"'{self.path}' could not be opened")

        self.add(source)

    def add(self, source):
        """Runs source. Static errors stop it before anything executes; in command-line mode a lone expression has its
        value echoed. Returns the parsed statements (None if a static error occurred).
        """
        tokens = Scanner(source, self.error_handler).scan_tokens()
        if self.show_tokens:
            for token in tokens:
                self.output(str(token))

        parser = Parser(tokens, self.error_handler)
        if self.cmd_line:
            statements, echo = parser.parse_repl()
        else:
            statements, echo = parser.parse(), False

        if self.error_handler.had_error:
            return None

        if self.show_ast:
            self.output(AstPrinter().print_program(statements))

        locals_ = Resolver(self.error_handler).resolve(statements)
        if self.error_handler.had_error:
            return None

        self.interpreter.resolve(locals_)

        if echo:
            self.interpreter.interpret_expression(statements[0].expression)
        else:
            self.interpreter.interpret(statements)

        return statements
