from __future__ import annotations

from typing import List, Tuple, Union


class Expr:
    """ Base class for all expression nodes. """

    def head(self) -> Leaf:
        """ The leaf reached by always following the left child. """
        raise NotImplementedError

    def flatten(self) -> Union[str, List]:
        raise NotImplementedError

    def __str__(self):
        return render(self)


class Leaf(Expr):
    """ Expression class for an identifier or operator name, like `a` or `+`. """

    def __init__(self, name: str):
        self.name = name

    def head(self) -> Leaf:
        return self

    def flatten(self) -> str:
        return self.name

    def __eq__(self, other):
        return isinstance(other, Leaf) and self.name == other.name

    def __hash__(self):
        return hash(("Leaf", self.name))

    def __repr__(self):
        return f"Leaf({self.name!r})"


class App(Expr):
    """ Expression class for application of `left` to `right`.

        Prefix application is `App(op, arg)`; infix application of `op` is
        `App(App(op, lhs), rhs)`.
    """

    def __init__(self, left: Expr, right: Expr):
        self.left = left
        self.right = right

    def head(self) -> Leaf:
        node = self.left
        while isinstance(node, App):
            node = node.left
        return node

    def decompose(self) -> Tuple[Expr, Expr]:
        """ Splits into the applied part and the rightmost operand. """
        return self.left, self.right

    def flatten(self) -> List:
        return [self.left.flatten(), self.right.flatten()]

    def __eq__(self, other):
        return isinstance(other, App) and self.left == other.left and self.right == other.right

    def __hash__(self):
        return hash(("App", self.left, self.right))

    def __repr__(self):
        return f"App({self.left!r}, {self.right!r})"


def infix(op: str, lhs: Expr, rhs: Expr) -> App:
    return App(App(Leaf(op), lhs), rhs)


def prefix(op: str, operand: Expr) -> App:
    return App(Leaf(op), operand)


def render(expr: Expr) -> str:
    """ Canonical parenthesized form: a leaf is its name, an application `(left right)`. """
    if isinstance(expr, Leaf):
        return expr.name
    elif isinstance(expr, App):
        return f"({render(expr.left)} {render(expr.right)})"
    else:
        raise TypeError(f"Unknown type '{type(expr)}' in render")
