"""Debug printer for lox syntax trees. Renders nodes in parenthesized prefix form, e.g. `(* (- 123) (group 45.67))`.

Only used by the --ast flag; has no effect on how programs run.
"""

from lox.core.interpreter import stringify


class AstPrinter:

    def print(self, node):
        return node.accept(self)

    def print_program(self, statements):
        return "\n".join(self.print(statement) for statement in statements)

    def parenthesize(self, name, *parts):
        result = f"({name}"
        for part in parts:
            if hasattr(part, "accept"):
                result += " " + part.accept(self)
            elif hasattr(part, "lexeme"):
                result += " " + part.lexeme
            else:
                result += " " + str(part)
        return result + ")"

    # --- statements ---

    def visit_block_stmt(self, stmt):
        return self.parenthesize("block", *stmt.statements)

    def visit_class_stmt(self, stmt):
        name = f"class {stmt.name.lexeme}"
        if stmt.superclass is not None:
            name += f" < {stmt.superclass.name.lexeme}"
        return self.parenthesize(name, *stmt.methods)

    def visit_expression_stmt(self, stmt):
        return self.parenthesize(";", stmt.expression)

    def visit_function_stmt(self, stmt):
        params = " ".join(param.lexeme for param in stmt.params)
        return self.parenthesize(f"fun {stmt.name.lexeme}({params})", *stmt.body)

    def visit_if_stmt(self, stmt):
        if stmt.else_branch is None:
            return self.parenthesize("if", stmt.condition, stmt.then_branch)
        return self.parenthesize("if-else", stmt.condition, stmt.then_branch, stmt.else_branch)

    def visit_print_stmt(self, stmt):
        return self.parenthesize("print", stmt.expression)

    def visit_return_stmt(self, stmt):
        if stmt.value is None:
            return "(return)"
        return self.parenthesize("return", stmt.value)

    def visit_var_stmt(self, stmt):
        if stmt.initializer is None:
            return self.parenthesize("var", stmt.name)
        return self.parenthesize("var", stmt.name, "=", stmt.initializer)

    def visit_while_stmt(self, stmt):
        return self.parenthesize("while", stmt.condition, stmt.body)

    # --- expressions ---

    def visit_assign_expr(self, expr):
        return self.parenthesize("=", expr.name, expr.value)

    def visit_binary_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_call_expr(self, expr):
        return self.parenthesize("call", expr.callee, *expr.arguments)

    def visit_get_expr(self, expr):
        return self.parenthesize(".", expr.object, expr.name)

    def visit_grouping_expr(self, expr):
        return self.parenthesize("group", expr.expression)

    def visit_literal_expr(self, expr):
        if isinstance(expr.value, str):
            return f'"{expr.value}"'
        return stringify(expr.value)

    def visit_logical_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_set_expr(self, expr):
        return self.parenthesize("=", expr.object, expr.name, expr.value)

    def visit_super_expr(self, expr):
        return self.parenthesize("super", expr.method)

    def visit_this_expr(self, expr):
        return "this"

    def visit_unary_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.right)

    def visit_variable_expr(self, expr):
        return expr.name.lexeme
