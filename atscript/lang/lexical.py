"""Lexical analysis for atscript. Note that this module does not read input files, but rather tokenizes arbitrary source
strings.

All grammar can be loosely defined as follows:

```
<var_decl>  ::= "@ " <name> "[" <type> "=" <literal> "]" ";"
<fun_decl>  ::= "@ /" <name> " " (<arg> "@" <type> " ")* "#" <statement>* "#"
<fun_call>  ::= "/" <name> (" " <literal>)* ";"   ; string literals are surrounded by "
<type>      ::= "string" | "int" | "float" | "bool"
```

Tokenization is a single left-to-right pass over characters. Pending characters are collected in a buffer, and which
token (if any) the buffer forms is decided by the type of the last token emitted. The rules in Lexer.match are tried
in order and only the first that applies fires, so reordering them changes what is tokenized.
"""

from dataclasses import dataclass, field
from enum import Enum


class TokenType(Enum):
    NONE = "none"  # ground state, emitted after every ';'
    SCOPE_START = "scope start"
    SCOPE_END = "scope end"
    IDENTIFIER = "identifier"
    VAR_NAME = "var name"
    VAR_OPTION_KEY = "var option key"
    VAR_OPTION_VALUE = "var option value"
    VAR_OPTION_SEP = "var option sep"
    FUN_START = "fun start"
    FUN_NAME = "fun name"
    FUN_ARG_KEY = "fun arg key"
    FUN_ARG_VALUE = "fun arg value"
    FUN_CALL = "fun call"
    FUN_CALL_ARG = "fun call arg"


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str
    line: int = field(default=0, compare=False)  # used for error messages

    def __str__(self):
        return f"type: {self.type.name}, buffer: {self.text!r}"


IDENTIFIER = "@ "
CALL = "/"
SCOPE = "#"
TERMINATOR = ";"
QUOTE = "\""

# states from which a new statement may begin (None means no token has been emitted yet)
GROUND = (None, TokenType.NONE, TokenType.SCOPE_START, TokenType.SCOPE_END)


def strip_indent(buffer):
    """Strips three leading spaces and then one more, if present, so that markers may be indented."""
    if buffer.startswith("   "):
        buffer = buffer[3:]
    if buffer.startswith(" "):
        buffer = buffer[1:]
    return buffer


def split_args(buffer):
    """Splits function call arguments on spaces that are outside of double quotes. One leading and one trailing quote
    are stripped from each argument. Repeated spaces give empty arguments, but a call with nothing after its name has no
    arguments at all.
    """
    args = []
    arg = ""
    quoted = False
    for char in buffer:
        if char == QUOTE:
            quoted = not quoted
        if char == " " and not quoted:
            args.append(arg)
            arg = ""
        else:
            arg += char
    args.append(arg)

    if args == [""]:
        return []

    stripped = []
    for arg in args:
        if arg.startswith(QUOTE):
            arg = arg[1:]
        if arg.endswith(QUOTE):
            arg = arg[:-1]
        stripped.append(arg)
    return stripped


class Lexer:
    """State machine that converts source text into a list of Tokens. Each Lexer tokenizes its source once."""

    def __init__(self, source, line=1):
        self.source = source + "\n"  # end of input acts as a newline, so a pending closing '#' is flushed
        self.line = line
        self.buffer = ""
        self.tokens = []

    @property
    def state(self):
        """Type of the last emitted token, or None if nothing has been emitted."""
        return self.tokens[-1].type if self.tokens else None

    def emit(self, token_type, text):
        self.tokens.append(Token(token_type, text, self.line))

    def flush(self, token_type, text):
        """Emits a token and clears the buffer."""
        self.emit(token_type, text)
        self.buffer = ""

    def match(self, char):
        """Fires the first rule that applies to the buffer and char. Returns whether char was consumed by the rule."""
        state = self.state
        buffer = self.buffer
        stripped = strip_indent(buffer)

        if state in GROUND and stripped == IDENTIFIER:
            self.flush(TokenType.IDENTIFIER, buffer)

        elif state is TokenType.IDENTIFIER and buffer.endswith("["):
            self.flush(TokenType.VAR_NAME, buffer[:-1])

        elif state is TokenType.IDENTIFIER and buffer == CALL:
            self.flush(TokenType.FUN_START, buffer)

        elif state is TokenType.FUN_START and buffer.endswith(" "):
            self.flush(TokenType.FUN_NAME, buffer[:-1])
            if char == SCOPE:  # function without params
                self.emit(TokenType.SCOPE_START, SCOPE)
                return True

        elif state is TokenType.FUN_NAME and char == SCOPE:
            for arg in buffer.split(" "):
                if arg:
                    name, __, arg_type = arg.partition("@")
                    self.emit(TokenType.FUN_ARG_KEY, name)
                    self.emit(TokenType.FUN_ARG_VALUE, arg_type)
            self.flush(TokenType.SCOPE_START, SCOPE)
            return True

        elif state in (TokenType.VAR_NAME, TokenType.VAR_OPTION_SEP) and buffer.endswith("="):
            self.flush(TokenType.VAR_OPTION_KEY, buffer[:-1])

        elif state is TokenType.VAR_OPTION_KEY and buffer.endswith(("]", ",")):
            self.emit(TokenType.VAR_OPTION_VALUE, buffer[:-1])
            if buffer.endswith(","):
                self.emit(TokenType.VAR_OPTION_SEP, ",")
            self.buffer = ""

        elif state in GROUND and stripped.startswith(CALL) and stripped.endswith(" "):
            self.flush(TokenType.FUN_CALL, stripped[:-1])

        elif state in GROUND and stripped.startswith(CALL) and char == TERMINATOR:
            self.flush(TokenType.FUN_CALL, stripped)  # call without arguments

        elif state is TokenType.FUN_CALL and char == TERMINATOR:
            for arg in split_args(buffer):
                self.emit(TokenType.FUN_CALL_ARG, arg)
            self.buffer = ""

        elif state in GROUND and stripped == SCOPE:
            self.flush(TokenType.SCOPE_END, SCOPE)
            return True

        return False

    def tokenize(self):
        """Tokenizes self.source. Malformed markers match no rule: they stay in the buffer and never form a token."""
        for char in self.source:
            consumed = self.match(char)

            if char != "\n" and not consumed:
                self.buffer += char

            if self.state not in (None, TokenType.NONE) and char == TERMINATOR:
                self.flush(TokenType.NONE, TERMINATOR)  # back to ground state after every statement

            if char == "\n":
                self.line += 1

        return self.tokens


def tokenize(source, line=1):
    """Returns the list of Tokens in source. line is the line number source starts at."""
    return Lexer(source, line).tokenize()
