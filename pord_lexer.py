from typing import Iterator, Optional


class ParseError(Exception):
    """ Base class for parse failures; `remainder` is the input left unconsumed. """

    def __init__(self, message: str, remainder: str = ""):
        super().__init__(message)
        self.remainder = remainder


class EndOfInput(ParseError):
    """ A token was required but the input is exhausted. """

    def __init__(self, remainder: str = ""):
        super().__init__("Unexpected end of input", remainder)


class Cursor:
    """ Mutable cursor over a source string.

        Tokens are consumed from the front of `rest`, so after a parse the cursor
        holds exactly the input that was not used.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0  # index of the next unread character

    @property
    def rest(self) -> str:
        return self.source[self.pos :]

    def __str__(self):
        return self.rest

    def __repr__(self):
        return f"Cursor({self.rest!r})"

    def peek_char(self) -> Optional[str]:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return None

    def next_char(self) -> Optional[str]:
        if (char := self.peek_char()) is not None:
            self.pos += 1
        return char

    def skip_whitespace(self):
        while (char := self.peek_char()) is not None and char.isspace():
            self.pos += 1

    def next_token(self) -> str:
        """ Reads whitespace, then either a run of alphabetic characters or a single
            non-alphabetic character.
        """
        self.skip_whitespace()

        if (first := self.next_char()) is None:
            raise EndOfInput(self.rest)

        token = first
        if not first.isalpha():
            return token

        while (char := self.peek_char()) is not None and char.isalpha():
            token += self.next_char()
        return token

    def peek_token(self) -> Optional[str]:
        """ Returns the next token without consuming it, or `None` at the end. """
        pos = self.pos
        try:
            return self.next_token()
        except EndOfInput:
            return None
        finally:
            self.pos = pos

    def tokens(self) -> Iterator[str]:
        while self.peek_token() is not None:
            yield self.next_token()
