"""Error handling for the lox language. Static faults (scanning, parsing, resolution) are reported by line and stop
the source from running; runtime faults carry the offending token and abort the remaining top-level statements.

Only LoxExceptions should be encountered while running: if another type of error makes it all the way to
ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored

from lox.core.tokens import TokenKind

EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70


class LoxException(Exception):
    """Base class for every error the lox pipeline raises on purpose."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ParseError(LoxException):
    """Raised inside the parser to unwind to the nearest synchronization point. It has already been reported by the
    time it is raised.
    """


class SourceError(LoxException):
    """Raised when a script cannot be loaded."""


class LoxRuntimeError(LoxException):
    """Runtime fault. token is used for line attribution and may be None for faults raised by the host (e.g. stack
    overflow).
    """

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token

    @property
    def line(self):
        return self.token.line if self.token is not None else None


class ErrorHandler:
    """Diagnostics sink for a lox session. Records every reported fault and prints it with color.

    Also a context manager that suppresses Python errors and reports them as lox errors instead.
    """
    ERROR = "red"
    RUNTIME = "magenta"

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stderr

        self.errors = []          # list of (line, message) static faults
        self.runtime_errors = []  # list of LoxRuntimeErrors

        self.had_error = False
        self.had_runtime_error = False
        self.had_source_error = False

    def error(self, line, message, where=""):
        """Reports a lexical, syntax or resolution fault at line. where is an optional location such as " at 'x'"."""
        self.errors.append((line, message))
        self.had_error = True

        error_msg = colored(f"[line {line}] ", attrs=["bold"])
        error_msg += colored(f"error{where}: ", ErrorHandler.ERROR, attrs=["bold"]) + message
        print(error_msg, file=self.stream)

    def token_error(self, token, message):
        """Reports a parse or resolution fault located at token."""
        if token.kind is TokenKind.EOF:
            self.error(token.line, message, " at end")
        else:
            self.error(token.line, message, f" at '{token.lexeme}'")

    def runtime_error(self, error):
        """Reports a runtime fault. error must be a LoxRuntimeError."""
        self.runtime_errors.append(error)
        self.had_runtime_error = True

        error_msg = colored("runtime error: ", ErrorHandler.RUNTIME, attrs=["bold"]) + error.message
        if error.line is not None:
            error_msg += "\n" + colored(f"[line {error.line}]", attrs=["bold"])
        print(error_msg, file=self.stream)

    def reset(self):
        """Clears the static error flag. Called between lines in command-line mode."""
        self.had_error = False

    def exit_code(self):
        """Process exit status for the faults seen so far (sysexits.h values, as jlox uses)."""
        if self.had_source_error:
            return EX_NOINPUT
        if self.had_error:
            return EX_DATAERR
        if self.had_runtime_error:
            return EX_SOFTWARE
        return 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or exc_type is SystemExit:
            return False

        if exc_type is KeyboardInterrupt:
            message = "keyboard interrupt"
        elif issubclass(exc_type, LoxRuntimeError):
            self.runtime_error(exc_val)
            return True
        elif issubclass(exc_type, LoxException):
            message = exc_val.message
            self.had_source_error = issubclass(exc_type, SourceError)
            self.had_error = True
        else:
            message = colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
            message += f"unknown error: '{exc_type.__name__}: {exc_val}'"
            self.had_error = True

        print(colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + message, file=self.stream)
        return True
