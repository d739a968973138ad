from __future__ import annotations

import logging
import threading

from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

import networkx as nx

from pord_lexer import ParseError

logger = logging.getLogger(__name__)


class Associativity(Enum):
    LEFT = 1
    RIGHT = 2


class UndefinedAssociativity(ParseError):
    """ Two infix operators met with no declared or default relative order. """

    def __init__(self, left: str, right: str, remainder: str = ""):
        super().__init__(
            f"Undefined associativity between '{left}' and '{right}'", remainder
        )
        self.left = left
        self.right = right


class Context:
    """ Static information about parsing.

        Each `Context` holds a partial ordering of operator precedences (a DAG whose
        edge `u -> v` means `u` binds tighter than `v`), the associativity of
        operators with themselves, and the set of operators that are infix by default.

        A context is configured once and then only read by the parser.
    """

    def __init__(self):
        self.partial_order: nx.DiGraph = nx.DiGraph()
        self.self_referential: Dict[str, Associativity] = {}
        self.infix_ops: Set[str] = set()

    @classmethod
    def standard(cls) -> Context:
        """ Builds a new context preloaded with the example precedence order. """
        context = cls()

        context.gt("a", "@")
        context.gt("a", "-")
        context.gt(".", "-")
        context.gt("@", ".")

        for op in ["."]:
            context.infix(op)

        return context

    def get_ident(self, operator: str) -> Optional[str]:
        """ Returns the node for `operator` in the partial order, or `None`. """
        return operator if operator in self.partial_order else None

    def ensure_ident(self, operator: str) -> str:
        """ Returns the node for `operator`, creating one if necessary. """
        if operator not in self.partial_order:
            self.partial_order.add_node(operator)
        return operator

    def path_from(self, left: str, right: str) -> bool:
        """ Whether there is a directed path from `left` to `right`. """
        if left not in self.partial_order or right not in self.partial_order:
            return False
        return nx.has_path(self.partial_order, left, right)

    def gt(self, first: str, second: str) -> bool:
        """ Indicates that `first` binds tighter than `second`.

            If `second` already reaches `first` the edge would close a cycle; in that
            case nothing is changed and `False` is returned.
        """
        if first == second or self.path_from(second, first):
            logger.info("rejected %r > %r: would create a cycle", first, second)
            return False

        self.partial_order.add_edge(self.ensure_ident(first), self.ensure_ident(second))
        logger.debug("declared %r > %r", first, second)
        return True

    def lt(self, first: str, second: str) -> bool:
        """ Indicates that `second` binds tighter than `first`. """
        return self.gt(second, first)

    def get_defined_associativity(self, left: str, right: str) -> Optional[Associativity]:
        """ Gets the declared associativity between two operators.

            The same operator on both sides is looked up in the self-associativity
            table. Otherwise, a path left -> right means left binds stronger (LEFT),
            and a path right -> left means right binds stronger (RIGHT). Acyclicity
            makes the two exclusive.
        """
        if left == right:
            return self.self_referential.get(left)

        if self.get_ident(left) is None or self.get_ident(right) is None:
            return None

        if self.path_from(left, right):
            return Associativity.LEFT
        elif self.path_from(right, left):
            return Associativity.RIGHT
        return None

    def get_associativity(self, left: str, right: str, remainder: str = "") -> Associativity:
        """ Like `get_defined_associativity`, with defaults: an infix operator against a
            non-infix one is LEFT, the reverse is RIGHT, two non-infix operators are
            LEFT, and two infix operators have no default.
        """
        if (defined := self.get_defined_associativity(left, right)) is not None:
            return defined

        infix_l, infix_r = self.is_infix(left), self.is_infix(right)
        if infix_l and infix_r:
            raise UndefinedAssociativity(left, right, remainder)
        elif not infix_l and infix_r:
            return Associativity.RIGHT
        return Associativity.LEFT

    def la(self, op: str):
        """ Marks `op` as left associative (to itself). """
        self.self_referential[op] = Associativity.LEFT

    def ra(self, op: str):
        """ Marks `op` as right associative (to itself). """
        self.self_referential[op] = Associativity.RIGHT

    def infix(self, op: str):
        self.infix_ops.add(op)

    def is_infix(self, op: str) -> bool:
        return op in self.infix_ops

    def is_operator(self, token: str) -> bool:
        """ Whether `token` plays an operator role rather than naming an operand. """
        return self.is_infix(token) or not token.isalpha()

    def operators(self) -> List[str]:
        names = set(self.partial_order.nodes) | set(self.self_referential) | self.infix_ops
        return sorted(names)

    def relations(self) -> List[Tuple[str, str]]:
        return sorted(self.partial_order.edges)


_standard: Optional[Context] = None
_standard_lock = threading.Lock()


def standard_context() -> Context:
    """ Returns the shared standard context, building it on first use. """
    global _standard
    if _standard is None:
        with _standard_lock:
            if _standard is None:
                _standard = Context.standard()
    return _standard
