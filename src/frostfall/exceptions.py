"""Error taxonomy for the rules core.

Catalog and definition errors are data bugs and surface immediately.
``EntityNotFound`` and ``InvalidStackState`` are raised internally only; the
resolver absorbs them at its public boundary.
"""
from __future__ import annotations


class RulesCoreError(Exception):
    """Base class for every error raised by the rules core."""


class UnknownEffectError(RulesCoreError, KeyError):
    """An effect id was requested that the catalog does not know."""

    def __init__(self, slug: str) -> None:
        super().__init__(slug)
        self.slug = slug

    def __str__(self) -> str:
        return f"Effect '{self.slug}' is not registered"


class InvalidDefinitionError(RulesCoreError, ValueError):
    """Configuration data (effect definitions, curve tables) is malformed."""


class EntityNotFound(RulesCoreError):
    """The referenced entity no longer exists in the world."""

    def __init__(self, entity: int) -> None:
        super().__init__(f"Entity {entity} does not exist")
        self.entity = entity


class InvalidStackState(RulesCoreError):
    """A condition entry broke its stack or duration bounds."""

    def __init__(self, entity: int, slug: str, detail: str) -> None:
        super().__init__(f"Entity {entity} effect '{slug}': {detail}")
        self.entity = entity
        self.slug = slug
        self.detail = detail
