"""Resolution of short names against the declarations of one file."""

from __future__ import annotations

from collections.abc import Iterable

from phpscope.config.constants import NAMESPACE_SEPARATOR
from phpscope.core.errors import NameNotFoundError
from phpscope.reflection.indexer import DeclarationIndex, qualify
from phpscope.reflection.models import RESOLVABLE_KINDS, DeclarationKind


class NameResolver:
    """Maps names used in a file to fully qualified names.

    Lookup order:

    1. a fully qualified name (leading ``\\``) is returned without the separator
    2. a use alias, alone or as the first segment of a qualified name
    3. ``<namespace>\\<name>`` for each namespace of the file, in order,
       when declared with one of the requested kinds
    4. the bare name, in a file without namespaces
    """

    def __init__(self, index: DeclarationIndex) -> None:
        self._index = index

    def resolve(self, name: str, kinds: Iterable[DeclarationKind | str] | None = None) -> str:
        """Resolve ``name`` to its fully qualified form.

        Args:
            name: Short, qualified or fully qualified name.
            kinds: Declaration kinds to search, defaults to every resolvable kind.

        Raises:
            NameNotFoundError: No rule matched.
        """
        if name.startswith(NAMESPACE_SEPARATOR):
            return name[1:]

        uses = self._index.use_statements
        if name in uses:
            return uses[name]
        alias, separator, rest = name.partition(NAMESPACE_SEPARATOR)
        if separator and alias in uses:
            return qualify(uses[alias], rest)

        search = self._kinds(kinds)
        for namespace in self._index.namespaces:
            candidate = qualify(namespace, name)
            if self._declared(candidate, search):
                return candidate

        if not self._index.namespaces and self._declared(name, search):
            return name

        raise NameNotFoundError.unresolved(name, [str(kind) for kind in search])

    @staticmethod
    def _kinds(kinds: Iterable[DeclarationKind | str] | None) -> tuple[DeclarationKind, ...]:
        if kinds is None:
            return RESOLVABLE_KINDS
        return tuple(DeclarationKind(kind) for kind in kinds)

    def _declared(self, name: str, kinds: tuple[DeclarationKind, ...]) -> bool:
        return any(self._index.contains(kind, name) for kind in kinds)
