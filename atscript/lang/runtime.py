"""Evaluation of atscript syntax trees. Nodes are executed in order, depth-first, within a Scope that is passed down
explicitly: there is no global state.

Scoping rules:
    - a called function sees every function its caller could see at the time of the call
    - a called function sees only its own arguments as variables, never its caller's variables
    - declarations made inside a call are discarded when the call returns
"""

from dataclasses import dataclass, field

from atscript.lang.error import GenericException
from atscript.lang.syntax import Call, FunctionDecl, Type, VariableDecl


@dataclass
class Scope:
    """Function and variable tables of a single call frame."""
    functions: dict = field(default_factory=dict)  # name: FunctionDecl
    variables: dict = field(default_factory=dict)  # name: Value

    def enter(self, function, args):
        """Returns the Scope that function executes in when called with args. Parameters are bound positionally, and
        extra parameters or extra args are ignored.
        """
        variables = {param.name: arg for param, arg in zip(function.params, args)}
        return Scope(dict(self.functions), variables)


def interpolate(text, variables, line=None):
    """Replaces every '@name*' in text with the value of variable name. The name is whatever lies between the first '@'
    and the first '*' in what remains, until text contains no '@' or no '*'.
    """
    while "@" in text and "*" in text:
        start = text.index("@")
        end = text.index("*")
        if end < start:
            raise GenericException("'{}' has '*' before '@'", text, line=line)

        name = text[start + 1:end]
        if name not in variables:
            raise GenericException("variable '{}' not found", name, line=line)

        text = text[:start] + str(variables[name]) + text[end + 1:]
    return text


def say(call, scope):
    """Built-in: prints its first argument (a string) after interpolating variables into it."""
    if not call.args or call.args[0].type is not Type.STRING:
        raise GenericException("parameter of '{}' isn't a string", call.name, line=call.line)
    print(interpolate(call.args[0].data, scope.variables, call.line))


BUILTINS = {"say": say}


def run(nodes, scope=None):
    """Executes nodes in scope (a new, empty Scope if None) and returns the scope."""
    if scope is None:
        scope = Scope()

    for node in nodes:
        if isinstance(node, FunctionDecl):
            scope.functions[node.name] = node

        elif isinstance(node, VariableDecl):
            scope.variables[node.name] = node.value

        elif isinstance(node, Call):
            if node.name in BUILTINS:
                BUILTINS[node.name](node, scope)
                continue

            function = scope.functions.get(node.name)
            if function is None:
                raise GenericException("function '{}' not found", node.name, line=node.line)
            run(function.body, scope.enter(function, node.args))

    return scope
