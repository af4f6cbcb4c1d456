"""Handles interactive/command-line mode for the atscript interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """atscript interpreter shell."""
    intro = "atscript interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continutations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_lines = []

    def default(self, line):
        """Executes arbitrary atscript statements once they are complete."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self._tmp_lines.append(line)
            chunk = "\n".join(self._tmp_lines)

            if not self.sess.is_complete(chunk):
                self.prompt = self.secondary_prompt
                return

            self._tmp_lines = []
            self.prompt = self._tmp_prompt

            self.sess.add(chunk)
            self.sess.run()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the atscript interpreter!\n\n"
              "Declare a variable with '@ x[int=5];' and print it with '/say \"x is @x*\";'.\n"
              "Declare a function with '@ /greet name@string # /say \"hi @name*\"; #' and\n"
              "call it with '/greet \"Ann\";'. Statements can span several lines: the\n"
              "interpreter waits until every function body is closed with '#'.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
