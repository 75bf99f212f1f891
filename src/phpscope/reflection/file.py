"""Declaration index of a single PHP source file.

Usage::

    reflection = ReflectionFile("src/Model/User.php", ReflectionFlag.SAFE)
    reflection.build()

    reflection.get_namespaces()          # ['App\\Model']
    reflection.get_class("User")         # 'App\\Model\\User'
    reflection.get_qualified_name("Id")  # resolved through use statements

The file is read when the object is created. Tokenization and indexing
happen in :meth:`ReflectionFile.build`, which every query calls, and run
once per instance.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from phpscope.config.models import ReflectionConfig
from phpscope.core.errors import DeclarationNotFoundError, NameNotFoundError, SourceFileError
from phpscope.core.logging import bound_source_file, get_logger
from phpscope.parsing.tokens import Token
from phpscope.parsing.treesitter import PhpTokenizer
from phpscope.reflection.indexer import DeclarationIndex, DeclarationIndexer
from phpscope.reflection.models import (
    Declaration,
    DeclarationHandle,
    DeclarationKind,
    ReflectionFlag,
)
from phpscope.reflection.resolver import NameResolver

log = get_logger(__name__)

_HANDLE_KINDS = (
    DeclarationKind.FUNCTION,
    DeclarationKind.INTERFACE,
    DeclarationKind.TRAIT,
    DeclarationKind.CLASS,
)


def _config_flags(config: ReflectionConfig) -> ReflectionFlag:
    flags = ReflectionFlag.NONE
    if config.safe:
        flags |= ReflectionFlag.SAFE
    if config.autoloadable:
        flags |= ReflectionFlag.AUTOLOADABLE
    if config.loaded:
        flags |= ReflectionFlag.LOADED
    return flags


class ReflectionFile:
    """Namespaces, use statements, constants, functions, interfaces, traits
    and classes declared in one PHP file.

    Args:
        path: PHP source file.
        flags: Combination of :class:`ReflectionFlag` values.
        config: Default flags and size limit. Flags enabled in the config are
            added to ``flags``.
        tokenizer: Tokenizer to reuse across files.

    Raises:
        SourceFileError: The file does not exist, cannot be read or exceeds
            the configured size limit.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        flags: ReflectionFlag = ReflectionFlag.NONE,
        *,
        config: ReflectionConfig | None = None,
        tokenizer: PhpTokenizer | None = None,
    ) -> None:
        config = config or ReflectionConfig()
        path = Path(path)
        if not path.is_file():
            raise SourceFileError.not_found(str(path))
        try:
            size = path.stat().st_size
            if size > config.max_file_size_bytes:
                raise SourceFileError.too_large(str(path), size, config.max_file_size_bytes)
            source = path.read_bytes()
        except OSError as e:
            raise SourceFileError.unreadable(str(path), e.strerror or str(e)) from e
        self._setup(str(path), source, flags | _config_flags(config), tokenizer)

    @classmethod
    def from_source(
        cls,
        source: str | bytes,
        flags: ReflectionFlag = ReflectionFlag.NONE,
        *,
        filename: str = "<string>",
        config: ReflectionConfig | None = None,
        tokenizer: PhpTokenizer | None = None,
    ) -> ReflectionFile:
        """Reflect PHP source text that does not live in a file.

        The config applies as for files: its flags are added and its size
        limit is enforced.
        """
        config = config or ReflectionConfig()
        data = source.encode("utf-8") if isinstance(source, str) else source
        if len(data) > config.max_file_size_bytes:
            raise SourceFileError.too_large(filename, len(data), config.max_file_size_bytes)
        reflection = cls.__new__(cls)
        reflection._setup(filename, data, flags | _config_flags(config), tokenizer)
        return reflection

    def _setup(
        self,
        filename: str,
        source: bytes,
        flags: ReflectionFlag,
        tokenizer: PhpTokenizer | None,
    ) -> None:
        self.filename = filename
        self.flags = ReflectionFlag(flags)
        self._source = source
        self._tokenizer = tokenizer or PhpTokenizer()
        self._tokens: list[Token] | None = None
        self._index: DeclarationIndex | None = None
        self._resolver: NameResolver | None = None
        self._handles: dict[tuple[DeclarationKind, str], DeclarationHandle] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"ReflectionFile({self.filename!r}, flags={self.flags!r})"

    # -- building ---------------------------------------------------------

    @property
    def source(self) -> str:
        return self._source.decode("utf-8", errors="replace")

    @property
    def tokens(self) -> list[Token]:
        """Tokens of the file, computed on first access."""
        if self._tokens is None:
            self._tokens = self._tokenizer.tokenize(self._source)
        return self._tokens

    @property
    def is_built(self) -> bool:
        return self._index is not None

    def build(self) -> DeclarationIndex:
        """Index the declarations of the file.

        Safe to call repeatedly and from several threads: the index is built
        once. A failed build leaves the instance unbuilt.

        Raises:
            MalformedDeclarationError: A constant declaration lacks its ``=``.
            ConstantEvaluationError: SAFE mode and a constant cannot be evaluated.
        """
        if self._index is not None:
            return self._index
        with self._lock:
            if self._index is not None:
                return self._index
            with bound_source_file(self.filename):
                indexer = DeclarationIndexer(
                    self.tokens,
                    safe=bool(self.flags & ReflectionFlag.SAFE),
                    tokenizer=self._tokenizer,
                )
                index = indexer.build()
                resolver = NameResolver(index)
                if self.flags & ReflectionFlag.LOADED:
                    for kind in _HANDLE_KINDS:
                        for declaration in index.by_kind(kind).values():
                            self._handle(declaration)
                log.debug("reflection_built", flags=str(self.flags), handles=len(self._handles))
            self._resolver = resolver
            self._index = index
        return index

    @property
    def index(self) -> DeclarationIndex:
        return self.build()

    @property
    def resolver(self) -> NameResolver:
        self.build()
        assert self._resolver is not None
        return self._resolver

    # -- queries ----------------------------------------------------------

    def get_namespaces(self) -> list[str]:
        return list(self.index.namespaces)

    def get_use_statements(self) -> dict[str, str]:
        """Use aliases, alias to fully qualified name."""
        return dict(self.index.use_statements)

    def get_constants(self) -> dict[str, Any]:
        """Constants by qualified name, with their value text or evaluated value."""
        return {name: constant.value for name, constant in self.index.constants.items()}

    def has_constant(self, name: str) -> bool:
        return self._find(DeclarationKind.CONSTANT, name) is not None

    def get_constant(self, name: str) -> Any:
        return self.index.constants[self._require(DeclarationKind.CONSTANT, name)].value

    def get_functions(self) -> dict[str, str | DeclarationHandle]:
        return self._entries(DeclarationKind.FUNCTION)

    def has_function(self, name: str) -> bool:
        return self._find(DeclarationKind.FUNCTION, name) is not None

    def get_function(self, name: str) -> str | DeclarationHandle:
        return self._entry(DeclarationKind.FUNCTION, name)

    def get_interfaces(self) -> dict[str, str | DeclarationHandle]:
        return self._entries(DeclarationKind.INTERFACE)

    def has_interface(self, name: str) -> bool:
        return self._find(DeclarationKind.INTERFACE, name) is not None

    def get_interface(self, name: str) -> str | DeclarationHandle:
        return self._entry(DeclarationKind.INTERFACE, name)

    def get_traits(self) -> dict[str, str | DeclarationHandle]:
        return self._entries(DeclarationKind.TRAIT)

    def has_trait(self, name: str) -> bool:
        return self._find(DeclarationKind.TRAIT, name) is not None

    def get_trait(self, name: str) -> str | DeclarationHandle:
        return self._entry(DeclarationKind.TRAIT, name)

    def get_classes(self) -> dict[str, str | DeclarationHandle]:
        return self._entries(DeclarationKind.CLASS)

    def has_class(self, name: str) -> bool:
        return self._find(DeclarationKind.CLASS, name) is not None

    def get_class(self, name: str) -> str | DeclarationHandle:
        return self._entry(DeclarationKind.CLASS, name)

    def get_qualified_name(
        self, name: str, kinds: Iterable[DeclarationKind | str] | None = None
    ) -> str:
        """Resolve a name used in this file to its fully qualified form.

        Raises:
            NameNotFoundError: The name matches no use alias and no declaration.
        """
        return self.resolver.resolve(name, kinds)

    # -- helpers ----------------------------------------------------------

    def _find(self, kind: DeclarationKind, name: str) -> str | None:
        entries = self.index.by_kind(kind)
        if name in entries:
            return name
        try:
            qualified = self.resolver.resolve(name, [kind])
        except NameNotFoundError:
            return None
        return qualified if qualified in entries else None

    def _require(self, kind: DeclarationKind, name: str) -> str:
        qualified = self._find(kind, name)
        if qualified is None:
            raise DeclarationNotFoundError.missing(str(kind), name)
        return qualified

    def _entry(self, kind: DeclarationKind, name: str) -> str | DeclarationHandle:
        qualified = self._require(kind, name)
        return self._value(self.index.by_kind(kind)[qualified])

    def _entries(self, kind: DeclarationKind) -> dict[str, str | DeclarationHandle]:
        return {
            name: self._value(declaration)
            for name, declaration in self.index.by_kind(kind).items()
        }

    def _value(self, declaration: Declaration) -> str | DeclarationHandle:
        if self.flags & (ReflectionFlag.AUTOLOADABLE | ReflectionFlag.LOADED):
            return self._handle(declaration)
        return declaration.name

    def _handle(self, declaration: Declaration) -> DeclarationHandle:
        key = (declaration.kind, declaration.name)
        handle = self._handles.get(key)
        if handle is None:
            handle = self._make_handle(declaration)
            self._handles[key] = handle
        return handle

    def _make_handle(self, declaration: Declaration) -> DeclarationHandle:
        tokens = self.tokens
        start = declaration.token.index
        end = start
        if declaration.scope is not None and declaration.scope.end_token_index is not None:
            end = declaration.scope.end_token_index
        return DeclarationHandle(
            kind=declaration.kind,
            name=declaration.name,
            short_name=declaration.short_name,
            namespace=declaration.namespace,
            filename=self.filename,
            start_line=tokens[start].line,
            end_line=tokens[end].line,
            methods=tuple(declaration.methods),
            source="".join(token.value for token in tokens[start : end + 1]),
        )
