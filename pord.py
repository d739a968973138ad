import sys
import logging
import argparse

from typing import List, Optional

from termcolor import cprint

import pord_ast
import pord_repl
import pord_parser

from pord_context import Context


def build_context(args: argparse.Namespace) -> Context:
    context = Context() if args.empty else Context.standard()

    for first, second in args.gt or []:
        if not context.gt(first, second):
            pord_repl.errprint(f"Ignored --gt {first} {second}: would create a cycle")
    for first, second in args.lt or []:
        if not context.lt(first, second):
            pord_repl.errprint(f"Ignored --lt {first} {second}: would create a cycle")
    for op in args.left or []:
        context.la(op)
    for op in args.right or []:
        context.ra(op)
    for op in args.infix or []:
        context.infix(op)

    return context


def run(**options):
    cprint(
        "Partial order expression parser\nDeclare precedences with .gt/.lt, then type expressions to see their trees\n",
        color="magenta",
    )
    pord_repl.run(**options)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Parse expressions under a partial order of operators.")
    parser.add_argument("expr", type=str, nargs="*")
    parser.add_argument("--gt", nargs=2, action="append", metavar=("A", "B"), help="A binds tighter than B")
    parser.add_argument("--lt", nargs=2, action="append", metavar=("A", "B"), help="B binds tighter than A")
    parser.add_argument("--left", action="append", metavar="OP", help="OP is left associative")
    parser.add_argument("--right", action="append", metavar="OP", help="OP is right associative")
    parser.add_argument("--infix", action="append", metavar="OP", help="OP is an infix operator")
    parser.add_argument("--empty", action="store_true", help="start from an empty context")
    parser.add_argument("--trace", action="store_true", help="print each parsing decision")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    context = build_context(args)

    if not args.expr:
        run(context=context, trace=args.trace, verbose=args.verbose)
        return 0

    trace = None
    if args.trace:
        trace = lambda event, **details: cprint(f"  {event}: {details}", color="cyan")

    status = 0
    for source in args.expr:
        try:
            print(pord_ast.render(pord_parser.Parser(context, trace=trace).parse(source)))
        except pord_parser.ParseError as err:
            pord_repl.errprint(f"{type(err).__name__}: {str(err)} at '{err.remainder}'")
            status = 1
    return status


if __name__ == "__main__":
    sys.exit(main())
