"""Syntax tree generation for atscript. Converts the Tokens produced by lexical.py into a list of nodes, one per
declaration or call. Nodes are a closed set of variants (FunctionDecl, VariableDecl, Call): there is no shared base
class, and consumers dispatch on the variant with isinstance.
"""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union

from atscript.lang.error import GenericException
from atscript.lang.lexical import TokenType

INT = re.compile(r"[+-]?[0-9]+")
FLOAT = re.compile(r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)", re.IGNORECASE)
INT_BITS = 64  # integers are signed 64-bit; larger literals are floats in calls and invalid in declarations


def fits_int(text):
    """Whether integer literal text is in the range of a signed INT_BITS integer."""
    return -2 ** (INT_BITS - 1) <= int(text) < 2 ** (INT_BITS - 1)


class Type(Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"

    @classmethod
    def named(cls, name, line=None):
        """Returns the Type called name in source."""
        try:
            return cls(name)
        except ValueError:
            raise GenericException("'{}' is not a type", name, line=line)


@dataclass(frozen=True)
class Value:
    """Immutable value of one of the four atscript Types."""
    type: Type
    data: Union[str, int, float, bool]

    @classmethod
    def convert(cls, value_type, text, line=None):
        """Converts text to a Value of value_type. Raises a GenericException if text isn't a value_type literal."""
        if value_type is Type.STRING:
            return cls(Type.STRING, text)
        elif value_type is Type.BOOL:
            return cls(Type.BOOL, text == "true")

        pattern, convert = (INT, int) if value_type is Type.INT else (FLOAT, float)
        if not pattern.fullmatch(text) or (value_type is Type.INT and not fits_int(text)):
            raise GenericException("'{}' is not a valid {}", (text, value_type.value), line=line)
        return cls(value_type, convert(text))

    @classmethod
    def infer(cls, text):
        """Infers the Type of a call argument literal: int, then float, then bool, then string."""
        if INT.fullmatch(text) and fits_int(text):
            return cls(Type.INT, int(text))
        elif FLOAT.fullmatch(text):
            return cls(Type.FLOAT, float(text))
        elif text in ("true", "false"):
            return cls(Type.BOOL, text == "true")
        return cls(Type.STRING, text)

    def __str__(self):
        if self.type is Type.BOOL:
            return "true" if self.data else "false"
        elif self.type is Type.FLOAT:
            if math.isnan(self.data):
                return "NaN"
            elif math.isfinite(self.data) and self.data.is_integer():
                return str(int(self.data))
        return str(self.data)

    def __repr__(self):
        return f"{self.type.name.capitalize()}({self.data!r})"


@dataclass(frozen=True)
class ArgumentDef:
    name: str
    type: Type


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    params: Tuple[ArgumentDef, ...]
    body: tuple
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class VariableDecl:
    name: str
    type: Type
    value: Value
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Call:
    name: str
    args: Tuple[Value, ...]
    line: int = field(default=0, compare=False)


Node = Union[FunctionDecl, VariableDecl, Call]


def _scope_end(tokens, start, name):
    """Returns the index of the first SCOPE_END at or after start."""
    for idx in range(start, len(tokens)):
        if tokens[idx].type is TokenType.SCOPE_END:
            return idx
    raise GenericException("body of '{}' is never closed with '#'", name, line=tokens[start - 1].line)


def parse(tokens):
    """Parses tokens into a list of nodes. Function bodies are parsed recursively."""
    nodes = []
    idx = 0
    while idx < len(tokens):
        token = tokens[idx]

        if token.type is TokenType.FUN_START:
            idx += 1
            if idx < len(tokens) and tokens[idx].type is TokenType.FUN_NAME:
                name = tokens[idx].text
                idx += 1

                params = []
                while (idx + 1 < len(tokens) and tokens[idx].type is TokenType.FUN_ARG_KEY
                       and tokens[idx + 1].type is TokenType.FUN_ARG_VALUE):
                    params.append(ArgumentDef(tokens[idx].text, Type.named(tokens[idx + 1].text, token.line)))
                    idx += 2

                end = _scope_end(tokens, idx, name)
                body = parse(tokens[idx:end])
                nodes.append(FunctionDecl(name, tuple(params), tuple(body), token.line))
                idx = end

        elif token.type is TokenType.VAR_NAME:
            option = tokens[idx + 1:idx + 3]
            if [opt.type for opt in option] != [TokenType.VAR_OPTION_KEY, TokenType.VAR_OPTION_VALUE]:
                raise GenericException("'{}' is missing its [type=value] declaration", token.text, line=token.line)

            key, value = option
            var_type = Type.named(key.text, token.line)
            nodes.append(VariableDecl(token.text, var_type, Value.convert(var_type, value.text, token.line),
                                      token.line))
            idx += 2  # further comma-separated options are skipped

        elif token.type is TokenType.FUN_CALL:
            args = []
            while idx + 1 < len(tokens) and tokens[idx + 1].type is TokenType.FUN_CALL_ARG:
                idx += 1
                args.append(Value.infer(tokens[idx].text))
            nodes.append(Call(token.text[1:], tuple(args), token.line))

        idx += 1

    return nodes


def display(node, indents=0):
    """Recursively displays node with readable format.

    Format:
    FunctionDecl(name='<name>', params=[<arg>@<type>, ...], body=[
        <node>,
        ...
    ])
    """
    indent = "    " * indents
    if isinstance(node, FunctionDecl):
        params = ", ".join(f"{param.name}@{param.type.value}" for param in node.params)
        result = f"{indent}FunctionDecl(name='{node.name}', params=[{params}]"
        if node.body:
            result += ", body=["
            for sub_node in node.body:
                result += "\n" + display(sub_node, indents + 1) + ","
            result = result[:-1] + f"\n{indent}]"
        return result + ")"

    elif isinstance(node, VariableDecl):
        return f"{indent}VariableDecl(name='{node.name}', type={node.type.value}, value={node.value!r})"

    args = ", ".join(repr(arg) for arg in node.args)
    return f"{indent}Call(name='{node.name}', args=[{args}])"
