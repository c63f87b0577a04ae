"""
Handler registry for the Mutant Pratt parser.

A `ParseletRegistry` maps token types to the functions that know how to
parse them:

    - prefix handlers start an expression (`handler(parser) -> Expression`)
    - infix handlers extend the expression built so far
      (`handler(parser, left) -> Expression`) and carry a binding power

Grammar extensions register extra handlers on a copy of the default
registry and pass it to `Parser`; the engine itself never changes.

Example:
    >>> registry = default_registry().copy()
    >>> registry.has_prefix("INT")
    True
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, NamedTuple

from mutant.mutant_precedence import Precedence, precedence_of

if TYPE_CHECKING:
    from mutant.mutant_ast import Expression
    from mutant.mutant_parser import Parser

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

PrefixHandler = Callable[["Parser"], "Expression"]
InfixHandler = Callable[["Parser", "Expression"], "Expression"]


class RegistryError(ValueError):
    """Raised on conflicting handler registrations."""


class InfixEntry(NamedTuple):
    handler: InfixHandler
    precedence: Precedence


class ParseletRegistry:
    """Token-type keyed tables of prefix and infix parse handlers.

    Attributes:
        prefix (dict[str, PrefixHandler]): Handlers that can start an expression.
        infix (dict[str, InfixEntry]): Handlers that continue one, with precedence.
    """

    def __init__(self) -> None:
        self.prefix: dict[str, PrefixHandler] = {}
        self.infix: dict[str, InfixEntry] = {}

    def register_prefix(
        self, token_type: str, handler: PrefixHandler, replace: bool = False
    ) -> None:
        """Registers a prefix handler for `token_type`.

        Args:
            token_type: The token type that starts the expression.
            handler: Callable consuming tokens from the parser.
            replace: Allow overriding an existing registration.

        Raises:
            RegistryError: If a handler is already registered and `replace` is False.
        """
        if token_type in self.prefix and not replace:
            raise RegistryError(
                f"Prefix parser for token type {token_type} is already registered"
            )
        if token_type in self.prefix:
            logger.debug("Replacing prefix parser for %s", token_type)
        self.prefix[token_type] = handler

    def register_infix(
        self,
        token_type: str,
        handler: InfixHandler,
        precedence: Precedence | None = None,
        replace: bool = False,
    ) -> None:
        """Registers an infix handler for `token_type`.

        Args:
            token_type: The operator token type.
            handler: Callable receiving the parser and the left operand.
            precedence: Binding power; defaults to the precedence table entry.
            replace: Allow overriding an existing registration.

        Raises:
            RegistryError: If a handler is already registered and `replace` is False.
        """
        if token_type in self.infix and not replace:
            raise RegistryError(
                f"Infix parser for token type {token_type} is already registered"
            )
        if precedence is None:
            precedence = precedence_of(token_type)
        self.infix[token_type] = InfixEntry(handler, precedence)

    def prefix_for(self, token_type: str) -> PrefixHandler | None:
        return self.prefix.get(token_type)

    def infix_for(self, token_type: str) -> InfixEntry | None:
        return self.infix.get(token_type)

    def has_prefix(self, token_type: str) -> bool:
        return token_type in self.prefix

    def has_infix(self, token_type: str) -> bool:
        return token_type in self.infix

    def remove_prefix(self, token_type: str) -> bool:
        """Drops the prefix handler for `token_type`; returns whether one existed."""
        return self.prefix.pop(token_type, None) is not None

    def remove_infix(self, token_type: str) -> bool:
        """Drops the infix handler for `token_type`; returns whether one existed."""
        return self.infix.pop(token_type, None) is not None

    def supported_prefix_types(self) -> list[str]:
        return sorted(self.prefix)

    def supported_infix_types(self) -> list[str]:
        return sorted(self.infix)

    def copy(self) -> ParseletRegistry:
        clone = ParseletRegistry()
        clone.prefix = dict(self.prefix)
        clone.infix = dict(self.infix)
        return clone


_DEFAULT: ParseletRegistry | None = None


def default_registry() -> ParseletRegistry:
    """Returns the shared registry holding the built-in Mutant grammar.

    Callers that want to extend the grammar should `copy()` it first.
    """
    global _DEFAULT
    if _DEFAULT is None:
        from mutant.mutant_parselets import build_default_registry

        _DEFAULT = build_default_registry()
    return _DEFAULT


__all__ = [
    "InfixEntry",
    "InfixHandler",
    "ParseletRegistry",
    "PrefixHandler",
    "RegistryError",
    "default_registry",
]
