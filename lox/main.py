"""Runs Lox scripts, or the interactive shell when no script is given. Called from the lox console script.

Exit codes follow sysexits: 65 if the script has a static (scan, parse or resolve) error, 70 if it stopped on a
runtime error.
"""

import argparse
import sys
import threading

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell

EX_DATAERR = 65
EX_SOFTWARE = 70

STACK_SIZE = 256 * 1024 * 1024  # C stack for script threads, sized for Interpreter.RECURSION_LIMIT frames


def exit_code(error_handler):
    """Maps the state of error_handler after a run to a process exit code."""
    if error_handler.had_error:
        return EX_DATAERR
    if error_handler.had_runtime_error:
        return EX_SOFTWARE
    return 0


def run_script(path, dump=None, color=True, verbose=False):
    """Runs (or dumps) the script at path and returns the exit code."""
    with ErrorHandler(color=color, verbose=verbose) as error_handler:
        sess = Session(error_handler)

        source = Session.read(path)
        if dump:
            sess.dump(source, dump)
        else:
            sess.run(source)

    return exit_code(error_handler)


def in_worker(function, *args):
    """Calls function on a thread with a STACK_SIZE stack, so that deep Lox recursion ends in a "Stack overflow."
    runtime error rather than a crash of the interpreter. Returns what function returns.
    """
    outcome = {}

    def target():
        try:
            outcome["code"] = function(*args)
        except SystemExit as exit_:
            outcome["code"] = exit_.code

    previous = threading.stack_size(STACK_SIZE)
    try:
        worker = threading.Thread(target=target, name="lox")
        worker.start()
    finally:
        threading.stack_size(previous)
    worker.join()

    return outcome.get("code", EX_SOFTWARE)


def main(argv=None):
    """Runs the Lox interpreter and returns the process exit code."""
    assert sys.version_info >= (3, 7), "lox cannot be run with python < 3.7"

    parser = argparse.ArgumentParser(prog="lox", description="Tree-walking interpreter for the Lox language.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--dump", choices=sorted(Session.PRINTERS),
                        help="print the parsed statements in debug form instead of running them")
    parser.add_argument("--verbose", action="store_true", help="show the offending source line under each error")
    parser.add_argument("--no-color", action="store_true", help="do not color error messages")
    args = parser.parse_args(argv)

    if args.file is not None:
        return in_worker(run_script, args.file, args.dump, not args.no_color, args.verbose)

    # the shell stays on the main thread, which is the one that receives KeyboardInterrupt
    with ErrorHandler(fatal=False, color=not args.no_color, verbose=args.verbose) as error_handler:
        Shell(Session(error_handler)).cmdloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
