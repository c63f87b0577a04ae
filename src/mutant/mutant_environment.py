"""
Lexical scopes for the Mutant interpreter.

An `Environment` maps names to runtime values and links to the scope that
encloses it. Scopes form a graph rather than a tree: a closure keeps its
defining scope alive after the call that created it has returned, and many
call scopes may share the same captured parent. Python's garbage collector
owns that lifetime; nothing here frees scopes explicitly.

Writes through `assign` always land in the scope that declared the name,
never in a new shadowing binding.
"""

from __future__ import annotations

from mutant.mutant_objects import MutantObject


class Environment:
    """A single scope in the scope chain.

    Attributes:
        store (dict[str, MutantObject]): Bindings declared in this scope.
        constants (set[str]): Names in `store` that are write-once.
        outer (Environment | None): Enclosing scope.
    """

    def __init__(self, outer: Environment | None = None) -> None:
        self.store: dict[str, MutantObject] = {}
        self.constants: set[str] = set()
        self.outer = outer

    def enclosed(self) -> Environment:
        """Creates a child scope of this one."""
        return Environment(self)

    def get(self, name: str) -> MutantObject | None:
        """Resolves `name` through the scope chain; None if unbound."""
        env: Environment | None = self
        while env is not None:
            if name in env.store:
                return env.store[name]
            env = env.outer
        return None

    def contains_locally(self, name: str) -> bool:
        return name in self.store

    def define(self, name: str, value: MutantObject) -> MutantObject:
        """Binds `name` in this scope, replacing any local binding."""
        self.store[name] = value
        self.constants.discard(name)
        return value

    def define_constant(self, name: str, value: MutantObject) -> MutantObject:
        self.store[name] = value
        self.constants.add(name)
        return value

    def find_declaration_scope(self, name: str) -> Environment | None:
        """Returns the nearest scope that declares `name`."""
        env: Environment | None = self
        while env is not None:
            if name in env.store:
                return env
            env = env.outer
        return None

    def is_constant(self, name: str) -> bool:
        scope = self.find_declaration_scope(name)
        return scope is not None and name in scope.constants

    def assign(self, name: str, value: MutantObject) -> bool:
        """Rebinds `name` in the scope that declared it.

        Returns:
            False if `name` is not declared anywhere in the chain. Constant
            checks are the caller's job.
        """
        scope = self.find_declaration_scope(name)
        if scope is None:
            return False
        scope.store[name] = value
        return True

    def names(self) -> list[str]:
        return sorted(self.store)

    def depth(self) -> int:
        """Number of scopes between this one and the outermost."""
        count = 0
        env = self.outer
        while env is not None:
            count += 1
            env = env.outer
        return count

    def __repr__(self) -> str:
        return f"Environment(names={self.names()!r}, depth={self.depth()})"


__all__ = ["Environment"]
