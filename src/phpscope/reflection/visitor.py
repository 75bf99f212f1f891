"""PHP source token visitor.

Walks a token sequence once and keeps a stack of open lexical scopes. A
scope opens on ``{`` (or on the ``;`` ending a brace-less namespace
statement) and closes on the matching ``}``. The declaration keyword seen
before the opening delimiter becomes the scope's entity token.

Scope transitions are reported synchronously to an optional handler::

    def on_scope(event: ScopeEvent, scope: Scope, visitor: SourceTokenVisitor) -> None:
        ...

    visitor = SourceTokenVisitor(source)
    visitor.set_scope_event_handler(on_scope)
    visitor.traverse()

The visitor knows nothing about correct PHP. Unbalanced braces are not an
error: scopes still open when the cursor moves past the last token are
closed, innermost first, so every START event gets its END event.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence

from phpscope.core.logging import get_logger
from phpscope.parsing.tokens import Token, TokenType
from phpscope.parsing.treesitter import PhpTokenizer
from phpscope.reflection.models import Scope, ScopeEvent

log = get_logger(__name__)

ScopeEventHandler = Callable[[ScopeEvent, Scope, "SourceTokenVisitor"], None]
TokenCallback = Callable[[int, Token, Scope | None], None]

# Scopes in which a "function" keyword declares a function or a method
_FUNCTION_CONTEXTS = frozenset(
    {
        TokenType.OPEN_TAG,  # Free function
        TokenType.NAMESPACE,  # Free function in namespace
        TokenType.TRAIT,  # Trait method
        TokenType.CLASS,  # Class method
    }
)


class SourceTokenVisitor:
    """Single-pass scope tracking cursor over PHP tokens."""

    def __init__(
        self,
        source: str | bytes | Iterable[Token],
        *,
        tokenizer: PhpTokenizer | None = None,
    ) -> None:
        """
        Args:
            source: PHP source text, or tokens produced by a tokenizer.
            tokenizer: Tokenizer used when ``source`` is text.

        Raises:
            TypeError: ``source`` is neither text nor an iterable of tokens.
        """
        if isinstance(source, (str, bytes)):
            self._tokens: Sequence[Token] = (tokenizer or PhpTokenizer()).tokenize(source)
        elif isinstance(source, Sequence):
            self._tokens = source
        elif isinstance(source, Iterable):
            self._tokens = tuple(source)
        else:
            raise TypeError("Sequence of tokens or PHP source code text expected")

        self._handler: ScopeEventHandler | None = None
        self._index = 0
        self._stack: list[Scope] = []
        self._pending = -1
        self._last_closed: Scope | None = None
        self.rewind()

    # -- iterator protocol ------------------------------------------------

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[tuple[int, Token]]:
        self.rewind()
        while self.valid():
            yield self._index, self._tokens[self._index]
            self.next()

    def count(self) -> int:
        """Number of tokens."""
        return len(self._tokens)

    def current(self) -> Token | None:
        """Token at the cursor, ``None`` once past the end."""
        return self._tokens[self._index] if self.valid() else None

    def key(self) -> int:
        return self._index

    def valid(self) -> bool:
        return 0 <= self._index < len(self._tokens)

    def next(self) -> None:
        """Advance the cursor and apply the scope transition of the new token."""
        self._index += 1
        if not self.valid():
            forced = len(self._stack)
            while self._stack:
                self._close_scope()
            if forced:
                log.debug("scopes_force_closed", count=forced)
            return
        self._process_current_token()

    def rewind(self) -> None:
        self._index = 0
        self._stack = []
        self._pending = -1
        self._last_closed = None
        if self._tokens:
            self._process_current_token()

    # -- public API -------------------------------------------------------

    @property
    def tokens(self) -> Sequence[Token]:
        return self._tokens

    @property
    def scopes(self) -> tuple[Scope, ...]:
        """Open scopes, outermost first."""
        return tuple(self._stack)

    def traverse(self, callback: TokenCallback | None = None) -> None:
        """Visit every token.

        Args:
            callback: Called with the token index, the token and the
                current scope for each token.
        """
        for index, token in self:
            if callback is not None:
                callback(index, token, self.get_current_scope())

    def set_scope_event_handler(self, handler: ScopeEventHandler | None = None) -> None:
        """Register the callable receiving scope events while traversing tokens.

        The handler receives the event type, the scope and the visitor itself.
        Pass ``None`` to remove it.
        """
        if handler is not None and not callable(handler):
            raise TypeError("None or callable expected")
        self._handler = handler

    def get_current_scope(self) -> Scope | None:
        """Innermost open scope.

        Once every scope has been closed, the last closed scope (the file
        top-level scope after a complete traversal) is returned.
        """
        if self._stack:
            return self._stack[-1]
        return self._last_closed

    @property
    def current_scope(self) -> Scope | None:
        return self.get_current_scope()

    # -- scope tracking ---------------------------------------------------

    def _process_current_token(self) -> None:
        token_type = self._tokens[self._index].type

        if token_type is TokenType.OPEN_TAG:
            # Later tags continue the code block opened by the first one
            if not self._stack:
                self._pending = self._index
                self._open_scope()
        elif token_type is TokenType.NAMESPACE:
            if not self._is_relative_name_prefix():
                self._pending = self._index
        elif token_type in (TokenType.INTERFACE, TokenType.TRAIT) or (
            token_type is TokenType.CLASS and self._previous_type() is not TokenType.DOUBLE_COLON
        ):
            self._pending = self._index
        elif (
            token_type is TokenType.FUNCTION
            and self._in_function_context()
            and self._previous_type() is not TokenType.USE
        ):
            # "use function Foo\{bar}" imports, it declares nothing
            self._pending = self._index
        elif token_type is TokenType.SEMICOLON:
            pending_type = self._pending_type()
            if pending_type is TokenType.NAMESPACE:
                self._close_statement_namespace()
                self._open_scope()
            elif pending_type is TokenType.FUNCTION:
                self._pending = -1
        elif token_type is TokenType.OPEN_BRACE:
            if self._pending_type() is TokenType.NAMESPACE:
                self._close_statement_namespace()
            self._open_scope()
        elif token_type is TokenType.CLOSE_BRACE:
            if self._stack:
                self._close_scope()

    def _pending_type(self) -> TokenType | None:
        if self._pending < 0:
            return None
        return self._tokens[self._pending].type

    def _in_function_context(self) -> bool:
        return bool(self._stack) and self._stack[-1].entity_type in _FUNCTION_CONTEXTS

    def _previous_type(self) -> TokenType | None:
        index = self._index - 1
        while index >= 0 and self._tokens[index].is_trivia:
            index -= 1
        return self._tokens[index].type if index >= 0 else None

    def _is_relative_name_prefix(self) -> bool:
        # namespace\Foo refers to the current namespace, it declares nothing
        index = self._index + 1
        while index < len(self._tokens) and self._tokens[index].is_trivia:
            index += 1
        return index < len(self._tokens) and self._tokens[index].type is TokenType.NS_SEPARATOR

    def _close_statement_namespace(self) -> None:
        """Close a brace-less namespace scope before the next namespace opens."""
        if not self._stack:
            return
        top = self._stack[-1]
        if (
            top.entity_type is TokenType.NAMESPACE
            and self._tokens[top.start_token_index].type is TokenType.SEMICOLON
        ):
            self._close_scope(end_index=self._pending - 1)

    def _open_scope(self) -> Scope:
        scope = Scope(
            level=len(self._stack),
            start_token_index=self._index,
            entity_token=self._tokens[self._pending] if self._pending >= 0 else None,
            parent_entity_token=self._stack[-1].entity_token if self._stack else None,
        )
        self._pending = -1
        self._stack.append(scope)
        if self._handler is not None:
            self._handler(ScopeEvent.START, scope, self)
        return scope

    def _close_scope(self, end_index: int | None = None) -> None:
        scope = self._stack.pop()
        if end_index is None:
            end_index = min(self._index, len(self._tokens) - 1)
        scope.end_token_index = end_index
        self._last_closed = scope
        if self._handler is not None:
            self._handler(ScopeEvent.END, scope, self)
