import sys

from typing import Dict, List

import colorama

from termcolor import cprint, colored

import pord_ast
import pord_parser

from pord_context import Context

colorama.init()


USAGE = """
USAGE: Type an expression to parse it, or enter one the following special commands:

    .exit or exit   : Stop and exit the program.
    .gt <a> <b>     : Declare that `a` binds tighter than `b`.
    .lt <a> <b>     : Declare that `b` binds tighter than `a`.
    .left <op>      : Make `op` left associative to itself.
    .right <op>     : Make `op` right associative to itself.
    .infix <op>     : Make `op` an infix operator.
    .context        : List the declared operators and relations.
    .reset          : Go back to the standard context.
    .help or help   : Show this message.
    .<option>       : Toggle the given option on/off.
"""


def errprint(msg):
    cprint(msg, color="red", file=sys.stderr)


def print_parse(context: Context, source: str, options: Dict[str, bool]):
    """ Parse `source` with `context` and print the rendered trees. """
    trace = None
    if options.get("trace"):
        trace = lambda event, **details: cprint(f"  {event}: {details}", color="cyan")

    try:
        for expr in pord_parser.Parser(context, trace=trace).parse_all(source):
            cprint(pord_ast.render(expr), color="green")
            if options.get("verbose"):
                cprint(repr(expr), color="magenta")

    except pord_parser.ParseError as err:
        errprint(f"{type(err).__name__}: {str(err)} at '{err.remainder}'")


def print_context(context: Context):
    print(colored("\nOperators:", color="blue"), *context.operators())

    cprint("\nBinds tighter than:\n", color="blue")
    for first, second in context.relations():
        cprint(f"{first:>6} > {second}", color="yellow")

    print(colored("\nInfix:", color="blue"), *sorted(context.infix_ops))
    print(
        colored("Self-associativity:", color="blue"),
        *(f"{op}:{assoc.name.lower()}" for op, assoc in sorted(context.self_referential.items())),
    )


def declare(context: Context, command: str, args: List[str]) -> bool:
    """ Apply a precedence declaration; returns whether it was accepted. """
    if command in ["gt", "lt"]:
        if len(args) != 2:
            errprint(f"Expected two operators after '.{command}'")
            return False
        if not getattr(context, command)(*args):
            errprint(f"Rejected: '{' '.join(args)}' would create a cycle")
            return False
        return True

    if len(args) != 1:
        errprint(f"Expected one operator after '.{command}'")
        return False
    if command == "left":
        context.la(args[0])
    elif command == "right":
        context.ra(args[0])
    else:
        context.infix(args[0])
    return True


class Repl:
    """ Holds the context that commands edit and expressions are parsed with. """

    def __init__(self, context: Context = None, **options):
        self.context = context if context is not None else Context.standard()
        self.options = options

    def run_repl_command(self, command: str, args: List[str]):
        if command in self.options:
            self.options[command] = not self.options[command]  # toggle option
            print(command, "=", self.options[command])
        elif command in ["gt", "lt", "left", "right", "infix"]:
            declare(self.context, command, args)
        elif command in ["context"]:
            print_context(self.context)
        elif command in ["help", "?", ""]:
            print(USAGE)
        elif command in ["reset"]:
            self.context = Context.standard()
        elif command in ["quit", "exit", "stop"]:
            sys.exit()
        else:
            errprint(f"Unknown command: '.{command}'")

    def run_command(self, command: str):
        print(colorama.Fore.YELLOW, end="")
        if not command:
            pass
        elif command in ["help", "quit", "exit", "stop"]:
            self.run_repl_command(command, [])
        elif command[0] == ".":
            name, *args = command[1:].split() or [""]
            self.run_repl_command(name, args)
        else:
            print_parse(self.context, command, self.options)
        print(colorama.Style.RESET_ALL, end="")


def run(context: Context = None, trace=False, verbose=False):
    repl = Repl(context, trace=trace, verbose=verbose)

    # Enter a REPL loop
    cprint("Type help or a command to be interpreted", color="green")
    command = ""
    while not command in ["exit", "quit"]:
        try:
            repl.run_command(command)
            print("P> ", end="")
            command = input().strip()
        except (KeyboardInterrupt, EOFError):
            sys.exit()


if __name__ == "__main__":
    import pord

    pord.run()
