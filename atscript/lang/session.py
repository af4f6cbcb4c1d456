"""Session control for atscript. Runs the lexer, parser and evaluator over source, either in file interpretation mode or
in command-line mode.
"""

from atscript.lang.error import GenericException
from atscript.lang.lexical import tokenize
from atscript.lang.runtime import Scope, run
from atscript.lang.syntax import display, parse


class Session:
    """Governs an atscript session, with control over the scope that top-level statements run in."""
    SH_FILE = "<in>"  # command-line interpreter filename
    TRACES = ("tokens", "tree")

    def __init__(self, error_handler, path, cmd_line, trace=()):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.trace = set(trace)   # which of TRACES to print when source is added

        self.lines = []      # every source line added so far, used for error messages
        self.scope = Scope()  # top-level functions and variables
        self.to_exec = []    # nodes to execute

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    source = file.read()
            except (OSError, UnicodeDecodeError):
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            self.add(source)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def is_complete(chunk):
        """Whether chunk can be run as is: it ends a statement, and every function body it opens is closed. Used for
        line continuations in command-line mode.
        """
        chunk = chunk.rstrip()
        scopes = sum(1 for idx, char in enumerate(chunk) if char == "#" and chunk[:idx].count("\"") % 2 == 0)
        return chunk.endswith((";", "#")) and scopes % 2 == 0

    def add(self, source):
        """Adds source to the current session. Execution is delayed until run is called."""
        line_num = len(self.lines) + 1
        self.lines.extend(source.split("\n"))

        tokens = tokenize(source, line_num)
        if "tokens" in self.trace:
            for token in tokens:
                print(token)

        try:
            nodes = parse(tokens)
        except GenericException as error:
            self._register(error.line, error)
            raise

        if "tree" in self.trace:
            for node in nodes:
                print(display(node))

        self.to_exec.extend(nodes)

    def run(self):
        """Runs this session's pending statements in order. Will raise any errors that are encountered, discarding
        the statements that have not run yet.
        """
        nodes, self.to_exec = self.to_exec, []
        for node in nodes:
            self._register(node.line)

            try:
                run([node], self.scope)
            except GenericException as error:
                self._register(error.line, error)
                raise

            self.error_handler.remove_line(self.path)

    def _register(self, line_num, error=None):
        """Registers source line line_num in the traceback, and shows error in the context of that line."""
        if not line_num or line_num > len(self.lines):
            return

        line = self.lines[line_num - 1].strip()
        self.error_handler.register_line(self.path, line, line_num)
        if error is not None:
            error.rebase(line)
