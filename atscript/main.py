"""Uses the atscript lexer, parser and evaluator to interpret .at files, or run in command-line mode. Also uses error
handling context manager. Called from the atscript console script.
"""

import argparse

from atscript.lang.error import ErrorHandler
from atscript.lang.session import Session
from atscript.lang.shell import Shell


def main(argv=None):
    """Runs atscript interpreter. Called from the atscript console script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="atscript")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--tokens", help="print tokens before running", action="store_true")
        parser.add_argument("--tree", help="print syntax tree before running", action="store_true")
        args = parser.parse_args(argv)

        trace = [name for name in Session.TRACES if getattr(args, name)]

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, trace=trace)
            sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, trace=trace)).cmdloop()


if __name__ == "__main__":
    main()
