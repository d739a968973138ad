import random
import threading

import pytest

from pord_ast import Leaf, render
from pord_lexer import Cursor
from pord_context import Context
from pord_parser import (
    EndOfInput,
    InvalidInfixSplice,
    ParseError,
    Parser,
    UndefinedAssociativity,
    parse,
)


def _render(source, context):
    return render(Parser(context).parse(source))


def _arith(*infix_ops):
    ctx = Context()
    for op in infix_ops:
        ctx.infix(op)
    return ctx


def test_scenario_standard_context():
    assert _render("@a,#b:c.q", Context.standard()) == "(@ ((, a) ((. (# ((: b) c))) q)))"


def test_scenario_declared_by_hand():
    ctx = Context()
    ctx.infix(".")
    assert ctx.gt("a", "@")
    assert ctx.gt("a", "-")
    assert ctx.gt(".", "-")
    assert ctx.gt("@", ".")
    assert _render("@ a , # b : c . q", ctx) == "(@ ((, a) ((. (# ((: b) c))) q)))"


def test_module_parse_uses_standard_context():
    assert render(parse("@a,#b:c.q")) == "(@ ((, a) ((. (# ((: b) c))) q)))"


def test_prefix_chain():
    expr = Parser(Context.standard()).parse("-a.b")
    assert expr.head() == Leaf("-")
    assert render(expr) == "(- ((. a) b))"


def test_undefined_collision():
    with pytest.raises(UndefinedAssociativity) as err:
        Parser(_arith("+", "*")).parse("a+b*c")
    assert err.value.left == "+"
    assert err.value.right == "*"
    assert err.value.remainder == "*c"

    with pytest.raises(UndefinedAssociativity) as err:
        Parser(_arith("+", "*")).parse("a + b * c")
    assert err.value.remainder == "* c"


def test_declared_precedence():
    ctx = _arith("+", "*")
    ctx.gt("*", "+")
    assert _render("a+b*c", ctx) == "((+ a) ((* b) c))"
    assert _render("a*b+c", ctx) == "((+ ((* a) b)) c)"


def test_self_associativity():
    ctx = _arith("-")
    with pytest.raises(UndefinedAssociativity):
        Parser(ctx).parse("a-b-c")

    ctx.la("-")
    assert _render("a-b-c", ctx) == "((- ((- a) b)) c)"

    ctx.ra("-")
    assert _render("a-b-c", ctx) == "((- a) ((- b) c))"


def test_application_is_left_associative():
    assert _render("f x y", Context()) == "((f x) y)"


def test_tighter_argument_descends():
    ctx = Context()
    ctx.gt("x", "f")
    assert _render("f x y", ctx) == "(f (x y))"


def test_groups():
    assert _render("f (g x) y", Context()) == "((f (g x)) y)"
    assert _render("(f)", Context()) == "f"


def test_trailing_input_is_left_in_cursor():
    cursor = Cursor("a b) c")
    assert render(Parser(Context()).parse(cursor)) == "(a b)"
    assert cursor.rest == ") c"


def test_parse_all():
    exprs = Parser(Context()).parse_all("f x; g; ;h")
    assert [render(expr) for expr in exprs] == ["(f x)", "g", "h"]


def test_end_of_input():
    with pytest.raises(EndOfInput):
        Parser(Context()).parse("")
    with pytest.raises(EndOfInput):
        Parser(Context()).parse("   ")
    with pytest.raises(EndOfInput):
        Parser(Context()).parse("(a b")


def test_end_of_input_inside_operand_unwinds():
    ctx = Context.standard()
    assert _render("-", ctx) == "-"
    assert _render("a.", ctx) == "(a .)"
    assert _render("@ .", ctx) == "(@ .)"


def test_malformed_groups():
    with pytest.raises(ParseError):
        Parser(Context()).parse("()")
    with pytest.raises(ParseError):
        Parser(Context()).parse(")")


def test_invalid_infix_splice():
    with pytest.raises(InvalidInfixSplice) as err:
        Parser(Context.standard()).parse(".a")
    assert err.value.op == "."

    with pytest.raises(InvalidInfixSplice):
        Parser(_arith("+", "*")).parse("a+*b")

    with pytest.raises(InvalidInfixSplice) as err:
        Parser(_arith("+", "*")).parse("(+)")
    assert err.value.remainder == "+)"

    with pytest.raises(InvalidInfixSplice):
        Parser(Context.standard()).parse("(.) a")


def test_deep_nesting_is_a_parse_error():
    ctx = _arith("^")
    ctx.ra("^")
    with pytest.raises(ParseError) as err:
        Parser(ctx).parse("^".join(["a"] * 5000))
    assert "nested too deeply" in str(err.value)


@pytest.mark.parametrize(
    "source",
    [
        "@a,#b:c.q",
        "-a.b",
        "a.b",
        "@a",
        "a , b : c",
        "f x y",
        "f (g x) y",
        "q . @",
        "a @ @",
        "b , @",
        "@ .",
        "a .",
        "(. a) b",
        "f (g .) -",
    ],
)
def test_render_is_idempotent(source):
    ctx = Context.standard()
    once = _render(source, ctx)
    assert _render(once, ctx) == once


RANDOM_TOKENS = ["a", "b", "q", "f", "@", "-", ".", ",", "#", ":", "(", ")"]


@pytest.mark.parametrize("seed", range(20))
def test_render_is_idempotent_on_random_input(seed):
    rng = random.Random(seed)
    ctx = Context.standard()
    checked = 0
    for _ in range(200):
        source = " ".join(rng.choice(RANDOM_TOKENS) for _ in range(rng.randint(1, 12)))
        try:
            once = _render(source, ctx)
        except ParseError:
            continue
        assert _render(once, ctx) == once, source
        checked += 1
    assert checked > 0


def test_trace_hook():
    events = []
    parser = Parser(Context.standard(), trace=lambda event, **details: events.append(event))
    parser.parse("@a,#b:c.q")
    assert events[0] == "prefix"
    assert {"prefix", "reroot", "splice", "close"} <= set(events)


def test_concurrent_parses_share_context():
    ctx = Context.standard()
    results = []

    def work():
        results.append(_render("@a,#b:c.q", ctx))

    threads = [threading.Thread(target=work) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == ["(@ ((, a) ((. (# ((: b) c))) q)))"] * 8
