"""Declaration indexing for a PHP token stream.

One pass of :class:`SourceTokenVisitor` feeds two collectors:

- scope-end events: every closed scope opened by ``namespace``,
  ``interface``, ``trait``, ``class`` or ``function`` is a declaration
  candidate, remembered together with its enclosing namespace
- direct token inspection: ``use`` and ``const`` statements found at file
  level or directly inside a namespace

Candidates are then named by reading the identifier that follows their
keyword, qualified with their namespace and stored in token order. Methods
(functions whose scope parent is a class or a trait) are attached to their
owner instead of the function index.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from phpscope.config.constants import NAMESPACE_SEPARATOR
from phpscope.core.errors import MalformedDeclarationError
from phpscope.core.logging import get_logger
from phpscope.parsing.tokens import NAME_TYPES, Token, TokenType
from phpscope.parsing.treesitter import PhpTokenizer
from phpscope.reflection.evaluation import ConstantEvaluator
from phpscope.reflection.models import (
    ConstantDeclaration,
    Declaration,
    DeclarationKind,
    Scope,
    ScopeEvent,
)
from phpscope.reflection.visitor import SourceTokenVisitor

log = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_\x80-\uffff][A-Za-z0-9_\x80-\uffff]*$")

_KIND_BY_ENTITY: dict[TokenType, DeclarationKind] = {
    TokenType.NAMESPACE: DeclarationKind.NAMESPACE,
    TokenType.FUNCTION: DeclarationKind.FUNCTION,
    TokenType.INTERFACE: DeclarationKind.INTERFACE,
    TokenType.TRAIT: DeclarationKind.TRAIT,
    TokenType.CLASS: DeclarationKind.CLASS,
}

# Parent entities of a free function
_FREE_FUNCTION_PARENTS = frozenset({TokenType.OPEN_TAG, TokenType.NAMESPACE})

# Parent entities of a method
_METHOD_OWNERS = frozenset({TokenType.CLASS, TokenType.TRAIT})

_OPENING = frozenset({TokenType.OPEN_PAREN, TokenType.OPEN_BRACKET, TokenType.OPEN_BRACE})
_CLOSING = frozenset({TokenType.CLOSE_PAREN, TokenType.CLOSE_BRACKET, TokenType.CLOSE_BRACE})


def qualify(namespace: str | None, name: str) -> str:
    """Prefix a local name with its namespace."""
    if not namespace:
        return name
    return f"{namespace}{NAMESPACE_SEPARATOR}{name}"


@dataclass
class DeclarationIndex:
    """Declarations of one file, per kind, in token order."""

    namespaces: dict[str, Declaration] = field(default_factory=dict)
    use_statements: dict[str, str] = field(default_factory=dict)
    constants: dict[str, ConstantDeclaration] = field(default_factory=dict)
    functions: dict[str, Declaration] = field(default_factory=dict)
    interfaces: dict[str, Declaration] = field(default_factory=dict)
    traits: dict[str, Declaration] = field(default_factory=dict)
    classes: dict[str, Declaration] = field(default_factory=dict)
    scope_starts: int = 0
    scope_ends: int = 0

    def by_kind(self, kind: DeclarationKind) -> dict[str, Any]:
        """Entries of one declaration kind."""
        return {
            DeclarationKind.NAMESPACE: self.namespaces,
            DeclarationKind.USE: self.use_statements,
            DeclarationKind.CONSTANT: self.constants,
            DeclarationKind.FUNCTION: self.functions,
            DeclarationKind.INTERFACE: self.interfaces,
            DeclarationKind.TRAIT: self.traits,
            DeclarationKind.CLASS: self.classes,
        }[kind]

    def contains(self, kind: DeclarationKind, name: str) -> bool:
        return name in self.by_kind(kind)


class DeclarationIndexer:
    """Builds a :class:`DeclarationIndex` from a token sequence.

    Args:
        tokens: Tokens of the whole file.
        safe: Evaluate constant value expressions instead of storing their text.
        tokenizer: Grammar holder used by the constant evaluator.
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        *,
        safe: bool = False,
        tokenizer: PhpTokenizer | None = None,
    ) -> None:
        self._tokens = tokens
        self._safe = safe
        self._tokenizer = tokenizer or PhpTokenizer()
        self._namespace_names: dict[int, str] = {}

    def build(self) -> DeclarationIndex:
        """Run the visitor over the tokens and collect every declaration.

        Raises:
            MalformedDeclarationError: A constant declaration lacks its ``=``.
            ConstantEvaluationError: SAFE mode and a constant value cannot
                be evaluated.
        """
        index = DeclarationIndex()
        candidates: list[tuple[Scope, str | None]] = []

        def on_scope(event: ScopeEvent, scope: Scope, visitor: SourceTokenVisitor) -> None:
            if event is ScopeEvent.START:
                index.scope_starts += 1
                return
            index.scope_ends += 1
            if scope.entity_type in _KIND_BY_ENTITY:
                candidates.append((scope, self._enclosing_namespace(visitor.scopes)))

        visitor = SourceTokenVisitor(self._tokens)
        visitor.set_scope_event_handler(on_scope)

        skip_until = -1
        for position, token in visitor:
            if position < skip_until or token.type not in (TokenType.USE, TokenType.CONST):
                continue
            scope = visitor.get_current_scope()
            if scope is None or not (
                scope.level == 0 or scope.entity_type is TokenType.NAMESPACE
            ):
                continue
            if token.type is TokenType.USE:
                skip_until = self._read_use_statement(position, index)
            else:
                namespace = self._enclosing_namespace(visitor.scopes)
                skip_until = self._read_constants(position, namespace, index)

        owners: dict[int, Declaration] = {}
        for scope, namespace in sorted(candidates, key=lambda c: c[0].start_token_index):
            self._register(scope, namespace, index, owners)

        log.debug(
            "declarations_indexed",
            namespaces=len(index.namespaces),
            uses=len(index.use_statements),
            constants=len(index.constants),
            functions=len(index.functions),
            interfaces=len(index.interfaces),
            traits=len(index.traits),
            classes=len(index.classes),
            scopes=index.scope_ends,
        )
        return index

    # -- declarations -----------------------------------------------------

    def _register(
        self,
        scope: Scope,
        namespace: str | None,
        index: DeclarationIndex,
        owners: dict[int, Declaration],
    ) -> None:
        token = scope.entity_token
        assert token is not None
        kind = _KIND_BY_ENTITY[token.type]

        if kind is DeclarationKind.NAMESPACE:
            name = self._namespace_name(scope)
            if name:
                index.namespaces[name] = Declaration(
                    kind=kind, name=name, short_name=name, namespace=None, token=token, scope=scope
                )
            return

        short_name, _ = self._read_name(token.index + 1)
        if not short_name:
            # Closure or anonymous class
            return

        if kind is DeclarationKind.FUNCTION and scope.parent_entity_type not in _FREE_FUNCTION_PARENTS:
            owner_token = scope.parent_entity_token
            if scope.parent_entity_type in _METHOD_OWNERS and owner_token is not None:
                owner = owners.get(owner_token.index)
                if owner is not None:
                    owner.methods.append(short_name)
            return

        declaration = Declaration(
            kind=kind,
            name=qualify(namespace, short_name),
            short_name=short_name,
            namespace=namespace,
            token=token,
            scope=scope,
        )
        owners[token.index] = declaration
        index.by_kind(kind)[declaration.name] = declaration

    def _namespace_name(self, scope: Scope) -> str:
        key = scope.start_token_index
        if key not in self._namespace_names:
            assert scope.entity_token is not None
            name, _ = self._read_name(scope.entity_token.index + 1)
            self._namespace_names[key] = name
        return self._namespace_names[key]

    def _enclosing_namespace(self, scopes: Sequence[Scope]) -> str | None:
        for scope in reversed(scopes):
            if scope.entity_type is TokenType.NAMESPACE:
                return self._namespace_name(scope) or None
        return None

    # -- use statements ---------------------------------------------------

    def _read_use_statement(self, position: int, index: DeclarationIndex) -> int:
        """Read ``use [function|const] A\\B [as C], ...;`` and group uses.

        Returns:
            Index of the token ending the statement.
        """
        cursor = self._skip_trivia(position + 1)
        if self._type_at(cursor) in (TokenType.FUNCTION, TokenType.CONST):
            cursor = self._skip_trivia(cursor + 1)

        while True:
            name, cursor = self._read_name(cursor)
            if not name:
                # Closure "use (...)"
                return cursor
            cursor = self._skip_trivia(cursor)

            if name.endswith(NAMESPACE_SEPARATOR) and self._type_at(cursor) is TokenType.OPEN_BRACE:
                cursor = self._read_use_group(name.rstrip(NAMESPACE_SEPARATOR), cursor + 1, index)
            else:
                alias, cursor = self._read_alias(cursor)
                self._add_use(index, name, alias)

            cursor = self._skip_trivia(cursor)
            if self._type_at(cursor) is not TokenType.COMMA:
                break
            cursor = self._skip_trivia(cursor + 1)

        return self._find(cursor, TokenType.SEMICOLON)

    def _read_use_group(self, prefix: str, cursor: int, index: DeclarationIndex) -> int:
        while cursor < len(self._tokens):
            cursor = self._skip_trivia(cursor)
            token_type = self._type_at(cursor)
            if token_type is TokenType.CLOSE_BRACE:
                return cursor + 1
            if token_type in (TokenType.FUNCTION, TokenType.CONST, TokenType.COMMA):
                cursor += 1
                continue
            name, cursor = self._read_name(cursor)
            if not name:
                return cursor
            alias, cursor = self._read_alias(self._skip_trivia(cursor))
            self._add_use(index, f"{prefix}{NAMESPACE_SEPARATOR}{name}", alias)
        return cursor

    def _read_alias(self, cursor: int) -> tuple[str | None, int]:
        if self._type_at(cursor) is not TokenType.AS:
            return None, cursor
        alias_index = self._skip_trivia(cursor + 1)
        alias, after = self._read_name(alias_index)
        if not alias or NAMESPACE_SEPARATOR in alias:
            return None, alias_index
        return alias, after

    @staticmethod
    def _add_use(index: DeclarationIndex, name: str, alias: str | None) -> None:
        qualified = name.lstrip(NAMESPACE_SEPARATOR)
        key = alias or qualified.rsplit(NAMESPACE_SEPARATOR, 1)[-1]
        index.use_statements[key] = qualified

    # -- constants --------------------------------------------------------

    def _read_constants(self, position: int, namespace: str | None, index: DeclarationIndex) -> int:
        """Read ``const A = expr[, B = expr];``.

        Returns:
            Index of the token ending the statement.
        """
        token = self._tokens[position]
        cursor = position + 1
        while True:
            cursor = self._skip_trivia(cursor)
            short_name, cursor = self._read_name(cursor)
            cursor = self._skip_trivia(cursor)
            if self._type_at(cursor) is not TokenType.EQUALS:
                if not short_name and cursor < len(self._tokens):
                    # Reserved words used as names come back as plain tokens
                    candidate = self._tokens[cursor].value
                    short_name = candidate if _IDENTIFIER.match(candidate) else ""
                line = self._tokens[min(cursor, len(self._tokens) - 1)].line
                label = qualify(namespace, short_name) if short_name else "<unnamed>"
                raise MalformedDeclarationError.missing_token("constant", label, "=", line)

            start = cursor + 1
            cursor = self._find_expression_end(start)
            expression = self._expression_text(start, cursor)
            name = qualify(namespace, short_name)
            value: Any = expression
            if self._safe:
                evaluator = ConstantEvaluator(
                    tokenizer=self._tokenizer,
                    lookup=lambda ref, ns=namespace: self._lookup_constant(index, ns, ref),
                )
                value = evaluator.evaluate(expression)
            index.constants[name] = ConstantDeclaration(
                name=name,
                short_name=short_name,
                namespace=namespace,
                token=token,
                expression=expression,
                value=value,
            )

            if self._type_at(cursor) is not TokenType.COMMA:
                return cursor
            cursor += 1

    def _find_expression_end(self, cursor: int) -> int:
        depth = 0
        while cursor < len(self._tokens):
            token_type = self._tokens[cursor].type
            if token_type in _OPENING:
                depth += 1
            elif token_type in _CLOSING:
                depth -= 1
            elif depth <= 0 and token_type in (
                TokenType.SEMICOLON,
                TokenType.COMMA,
                TokenType.CLOSE_TAG,
            ):
                return cursor
            cursor += 1
        return cursor

    def _expression_text(self, start: int, end: int) -> str:
        pieces: list[str] = []
        spaced = False
        for token in self._tokens[start:end]:
            if token.is_trivia:
                spaced = True
                continue
            if spaced and pieces:
                pieces.append(" ")
            pieces.append(token.value)
            spaced = False
        return "".join(pieces)

    @staticmethod
    def _lookup_constant(index: DeclarationIndex, namespace: str | None, reference: str) -> Any:
        if reference.startswith(NAMESPACE_SEPARATOR):
            candidates = [reference[1:]]
        else:
            head, _, rest = reference.partition(NAMESPACE_SEPARATOR)
            if head in index.use_statements:
                target = index.use_statements[head]
                candidates = [qualify(target, rest) if rest else target]
            else:
                # Unqualified constants fall back to the global namespace
                candidates = [qualify(namespace, reference), reference]
        for candidate in candidates:
            if candidate in index.constants:
                return index.constants[candidate].value
        raise KeyError(reference)

    # -- token helpers ----------------------------------------------------

    def _type_at(self, position: int) -> TokenType | None:
        if 0 <= position < len(self._tokens):
            return self._tokens[position].type
        return None

    def _skip_trivia(self, position: int) -> int:
        while position < len(self._tokens) and self._tokens[position].is_trivia:
            position += 1
        return position

    def _find(self, position: int, token_type: TokenType) -> int:
        while position < len(self._tokens) and self._tokens[position].type is not token_type:
            position += 1
        return position

    def _read_name(self, position: int) -> tuple[str, int]:
        """Read a possibly qualified identifier, skipping leading trivia and ``&``.

        Returns:
            The name (empty when none follows) and the index after it.
        """
        position = self._skip_trivia(position)
        if self._type_at(position) is TokenType.AMPERSAND:
            position = self._skip_trivia(position + 1)

        parts: list[str] = []
        while position < len(self._tokens):
            token = self._tokens[position]
            if token.type in NAME_TYPES or (
                parts and parts[-1] == NAMESPACE_SEPARATOR and _IDENTIFIER.match(token.value)
            ):
                # Reserved words are valid namespace segments after a separator
                parts.append(token.value)
            else:
                break
            position += 1
        return "".join(parts), position
