import logging

from typing import Any, Callable, Iterator, Optional, Union

from pord_ast import App, Expr, Leaf
from pord_lexer import Cursor, EndOfInput, ParseError
from pord_context import Associativity, Context, UndefinedAssociativity, standard_context

__all__ = [
    "Parser",
    "ParseError",
    "EndOfInput",
    "UndefinedAssociativity",
    "InvalidInfixSplice",
    "parse",
]

logger = logging.getLogger(__name__)

Trace = Callable[..., Any]

OPEN_GROUP = "("
CLOSE_GROUP = ")"
SEPARATOR = ";"


class InvalidInfixSplice(ParseError):
    """ A declared infix operator appeared where an operand was required. """

    def __init__(self, op: str, remainder: str = ""):
        super().__init__(f"Infix operator '{op}' has no left operand", remainder)
        self.op = op


class Parser:
    """ Builds application trees from tokens, asking a `Context` how operators bind.

        Each call to `_parse_tail` is a frame accumulating one tree. A frame opened for
        the operand of some operator (its parent) ends at the first token that does
        not belong to that operand; the top frame only ends at the end of input, at
        a `)` or at a `;`.
    """

    def __init__(self, context: Optional[Context] = None, trace: Optional[Trace] = None):
        self.context: Context = context if context is not None else standard_context()
        self.trace = trace
        self.cursor: Cursor = None

    def __emit(self, event: str, **details):
        logger.debug("%s %s", event, details)
        if self.trace is not None:
            self.trace(event, **details)

    def __peek_tok(self) -> Optional[str]:
        return self.cursor.peek_token()

    def __eat_tok(self) -> str:
        return self.cursor.next_token()

    def __remainder(self) -> str:
        return self.cursor.rest.lstrip()

    def __at_end(self) -> bool:
        """ Whether no further operand can follow: end of input, `)` or `;`. """
        tok = self.__peek_tok()
        return tok is None or tok in (CLOSE_GROUP, SEPARATOR)

    def __associativity(self, left: str, right: str) -> Associativity:
        return self.context.get_associativity(left, right, self.__remainder())

    def parse(self, source: Union[str, Cursor]) -> Expr:
        """ Parses one expression from the front of `source`.

            A `Cursor` is advanced past the consumed input; anything after the
            expression (e.g. an unmatched `)`) is left in it.
        """
        self.cursor = source if isinstance(source, Cursor) else Cursor(source)

        try:
            expr = self._parse_expression(parent=None)
        except RecursionError as err:
            raise ParseError("Expression nested too deeply", self.__remainder()) from err

        if expr is not None:
            return expr

        if (tok := self.__peek_tok()) is None:
            raise EndOfInput(self.__remainder())
        raise ParseError(f"Unexpected '{tok}' when expecting an expression", self.__remainder())

    def parse_all(self, source: Union[str, Cursor]) -> Iterator[Expr]:
        """ Yields the `;`-separated expressions of `source`. """
        self.cursor = source if isinstance(source, Cursor) else Cursor(source)

        while (tok := self.__peek_tok()) is not None:
            if tok == SEPARATOR:
                self.__eat_tok()  # ignore empty statements
                continue
            yield self.parse(self.cursor)

    def _parse_expression(self, parent: Optional[str], section: bool = False) -> Optional[Expr]:
        """ `expression ::= operand tail` """
        if (operand := self._parse_operand(parent, section)) is None:
            return None
        return self._parse_tail(operand, parent)

    def _parse_operand(self, parent: Optional[str], section: bool = False) -> Optional[Expr]:
        """ `operand ::= identifier
                       | '(' expression ')'
                       | <prefixop> expression?`

            Returns `None` when no operand follows, so that a prefix operator missing
            its operand is left on its own. An infix operator is only taken as an operand
            when it ends the operand of another operator, as in `@ .`.

            With `section`, the first token of a group, an infix operator is read as a
            prefix one: `(. x)` is how a partially applied infix operator renders.
        """
        tok = self.__peek_tok()
        if tok is None or tok in (CLOSE_GROUP, SEPARATOR):
            return None

        if tok == OPEN_GROUP:
            return self._parse_group()

        remainder = self.__remainder()
        self.__eat_tok()  # operand

        if not self.context.is_operator(tok):
            return Leaf(tok)

        if self.context.is_infix(tok) and not section:
            if parent is None or not self.__at_end():
                raise InvalidInfixSplice(tok, remainder)
            return Leaf(tok)

        # Prefix operator, its operand is a frame of its own
        self.__emit("prefix", op=tok, parent=parent)
        if (operand := self._parse_expression(parent=tok)) is None:
            if self.context.is_infix(tok):
                raise InvalidInfixSplice(tok, remainder)  # a lone section, `(+)`
            return Leaf(tok)
        return App(Leaf(tok), operand)

    def _parse_group(self) -> Expr:
        """ `group ::= '(' expression ')'` """
        self.__eat_tok()  # '('
        expr = self._parse_expression(parent=None, section=True)

        if (tok := self.__peek_tok()) is None:
            raise EndOfInput(self.__remainder())
        elif tok != CLOSE_GROUP:
            raise ParseError(f"Expected ')' but got '{tok}'", self.__remainder())
        elif expr is None:
            raise ParseError("Expected an expression inside '()'", self.__remainder())

        self.__eat_tok()  # ')'
        return expr

    def _binds_inside(self, parent: str, tok: str) -> bool:
        """ Whether `tok` still belongs to the operand of `parent`.

            For an infix parent the token stays inside when it binds tighter (RIGHT);
            a prefix-like parent keeps it on LEFT, like an application.
        """
        associativity = self.__associativity(parent, tok)
        if self.context.is_infix(parent):
            return associativity is Associativity.RIGHT
        return associativity is Associativity.LEFT

    def _parse_tail(self, left: Expr, parent: Optional[str]) -> Expr:
        """ `tail ::= (<op> expression | identifier | group)*` """
        while True:
            tok = self.__peek_tok()
            if tok is None or tok in (CLOSE_GROUP, SEPARATOR):
                return left

            if tok == OPEN_GROUP:
                left = App(left, self._parse_group())
                continue

            if parent is not None and not self._binds_inside(parent, tok):
                self.__emit("close", parent=parent, token=tok)
                return left

            head = left.head().name
            remainder = self.__remainder()
            self.__eat_tok()  # token

            # An operator with nothing after it is an argument, as in `(f +)`
            if self.context.is_operator(tok) and self.__at_end():
                self.__emit("append", head=head, token=tok)
                left = App(left, Leaf(tok))
                continue

            associativity = self.context.get_associativity(head, tok, remainder)
            if self.context.is_operator(tok):
                if associativity is Associativity.LEFT:
                    left = self._reroot(left, tok)
                else:
                    left = self._splice(left, tok)

            elif associativity is Associativity.LEFT:
                self.__emit("append", head=head, token=tok)
                left = App(left, Leaf(tok))

            else:
                self.__emit("descend", head=head, token=tok)
                left = App(left, self._parse_tail(Leaf(tok), parent=head))

    def _apply_infix(self, op: str, lhs: Expr) -> Expr:
        """ `App(App(op, lhs), rhs)`; a right operand is known to follow `op`. """
        return App(App(Leaf(op), lhs), self._parse_expression(parent=op))

    def _reroot(self, left: Expr, op: str) -> Expr:
        """ `op` takes the whole of `left` as its left operand. """
        self.__emit("reroot", head=left.head().name, op=op)
        return self._apply_infix(op, left)

    def _splice(self, left: Expr, op: str) -> Expr:
        """ `op` takes the rightmost operand of `left`, which is rebuilt around it.

            A bare leaf has no operand to take, so the leaf itself is used.
        """
        self.__emit("splice", head=left.head().name, op=op)
        if isinstance(left, Leaf):
            return self._apply_infix(op, left)

        applied, rightmost = left.decompose()
        return App(applied, self._apply_infix(op, rightmost))


def parse(source: Union[str, Cursor], context: Optional[Context] = None) -> Expr:
    return Parser(context).parse(source)
