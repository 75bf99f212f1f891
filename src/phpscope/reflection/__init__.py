"""Scope tracking and declaration indexing of PHP files."""

from phpscope.reflection.evaluation import ConstantEvaluator
from phpscope.reflection.file import ReflectionFile
from phpscope.reflection.indexer import DeclarationIndex, DeclarationIndexer
from phpscope.reflection.models import (
    RESOLVABLE_KINDS,
    ConstantDeclaration,
    Declaration,
    DeclarationHandle,
    DeclarationKind,
    ReflectionFlag,
    Scope,
    ScopeEvent,
)
from phpscope.reflection.resolver import NameResolver
from phpscope.reflection.visitor import SourceTokenVisitor

__all__ = [
    "RESOLVABLE_KINDS",
    "ConstantDeclaration",
    "ConstantEvaluator",
    "Declaration",
    "DeclarationHandle",
    "DeclarationIndex",
    "DeclarationIndexer",
    "DeclarationKind",
    "NameResolver",
    "ReflectionFile",
    "ReflectionFlag",
    "Scope",
    "ScopeEvent",
    "SourceTokenVisitor",
]
