"""Data types shared by the scope visitor, the indexer and ReflectionFile."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag, StrEnum
from typing import Any

from phpscope.parsing.tokens import Token, TokenType


class ScopeEvent(StrEnum):
    """Scope transitions reported by the visitor."""

    START = "open"
    END = "close"


class DeclarationKind(StrEnum):
    """Declaration categories indexed for a file."""

    NAMESPACE = "namespace"
    USE = "use"
    CONSTANT = "constant"
    FUNCTION = "function"
    INTERFACE = "interface"
    TRAIT = "trait"
    CLASS = "class"


# Kinds a short name may resolve to
RESOLVABLE_KINDS: tuple[DeclarationKind, ...] = (
    DeclarationKind.INTERFACE,
    DeclarationKind.TRAIT,
    DeclarationKind.CLASS,
    DeclarationKind.FUNCTION,
    DeclarationKind.CONSTANT,
)


class ReflectionFlag(IntFlag):
    """Options of a ReflectionFile.

    SAFE: constant value expressions are evaluated.
    AUTOLOADABLE: declaration getters return handles, created on first access.
    LOADED: handles are created while the index is built.
    """

    NONE = 0
    SAFE = 1
    AUTOLOADABLE = 2
    LOADED = 4


@dataclass
class Scope:
    """One lexical nesting level.

    ``end_token_index`` stays ``None`` while the scope is open.
    """

    level: int
    start_token_index: int
    end_token_index: int | None = None
    entity_token: Token | None = None
    parent_entity_token: Token | None = None

    @property
    def entity_type(self) -> TokenType | None:
        return self.entity_token.type if self.entity_token is not None else None

    @property
    def parent_entity_type(self) -> TokenType | None:
        if self.parent_entity_token is None:
            return None
        return self.parent_entity_token.type

    @property
    def is_closed(self) -> bool:
        return self.end_token_index is not None


@dataclass
class Declaration:
    """A namespace, function, interface, trait or class found in a file."""

    kind: DeclarationKind
    name: str  # Qualified name
    short_name: str
    namespace: str | None
    token: Token  # Keyword token that opened the declaration
    scope: Scope | None = None
    methods: list[str] = field(default_factory=list)


@dataclass
class ConstantDeclaration:
    """A ``const`` declared at file or namespace level."""

    name: str
    short_name: str
    namespace: str | None
    token: Token
    expression: str  # Value source text
    value: Any  # Evaluated value in SAFE mode, expression otherwise


@dataclass(frozen=True)
class DeclarationHandle:
    """Introspection handle for a declaration of a reflected file."""

    kind: DeclarationKind
    name: str
    short_name: str
    namespace: str | None
    filename: str
    start_line: int
    end_line: int
    methods: tuple[str, ...]
    source: str

    def __str__(self) -> str:
        return self.name
