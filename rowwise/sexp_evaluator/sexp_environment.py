"""
Lexical scoping environment for S-expression evaluation.

Environments form a chain: each scope resolves its own bindings first and
falls back to its parent. A row binding is a child scope of the enclosing
(call-site) scope, so column values shadow enclosing names.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from rowwise.system.errors import UnresolvedNameError

logger = logging.getLogger(__name__)


class SexpEnvironment:
    """
    Represents a lexical environment for S-expression evaluation,
    supporting variable lookup, definition, and nested scopes.
    """

    def __init__(
        self,
        bindings: Optional[Dict[str, Any]] = None,
        parent: Optional['SexpEnvironment'] = None
    ):
        """
        Initializes a new SexpEnvironment.

        Args:
            bindings: An optional dictionary of initial variable bindings for this scope.
            parent: An optional parent environment for creating nested scopes.
                    Defaults to None, indicating a top-level scope.
        """
        self._bindings: Dict[str, Any] = bindings if bindings is not None else {}
        self._parent: Optional['SexpEnvironment'] = parent
        logger.debug(f"Initialized SexpEnvironment (Parent: {parent is not None}, Bindings: {list(self._bindings.keys())})")

    @classmethod
    def coerce(cls, scope: Any) -> 'SexpEnvironment':
        """
        Accepts an existing environment, a plain mapping, or None and
        returns an environment usable as an enclosing scope.
        Mappings are copied so the caller's dict is never written to.
        """
        if scope is None:
            return cls()
        if isinstance(scope, SexpEnvironment):
            return scope
        if isinstance(scope, Mapping):
            return cls(bindings=dict(scope))
        raise TypeError(f"Enclosing scope must be a SexpEnvironment, a mapping or None, got {type(scope).__name__}.")

    def lookup(self, name: str) -> Any:
        """
        Looks up a variable name in the environment and its parent scopes.

        Args:
            name: The name (symbol) of the variable to look up.

        Returns:
            The value associated with the name.

        Raises:
            UnresolvedNameError: If the name is not found in this environment or any
                                 of its ancestor environments.
        """
        env: Optional[SexpEnvironment] = self
        while env is not None:
            if name in env._bindings:
                return env._bindings[name]
            env = env._parent
        logger.debug(f"  '{name}' not found in env chain starting from id={id(self)}.")
        raise UnresolvedNameError(name)

    def is_bound(self, name: str) -> bool:
        """True when `name` resolves somewhere in the chain."""
        try:
            self.lookup(name)
        except UnresolvedNameError:
            return False
        return True

    def define(self, name: str, value: Any) -> None:
        """
        Defines or redefines a variable in the *current* environment scope.
        This does not affect parent scopes.
        """
        logger.debug(f"Defining '{name}' = {type(value)} in env {id(self)}")
        self._bindings[name] = value

    def extend(self, bindings: Dict[str, Any]) -> 'SexpEnvironment':
        """
        Creates a new child environment that extends the current environment.

        Args:
            bindings: A dictionary of new variable names and their evaluated values
                      to add to the child environment's local scope.

        Returns:
            A new SexpEnvironment instance representing the child scope.
        """
        return SexpEnvironment(bindings=bindings, parent=self)

    def get_local_bindings(self) -> Dict[str, Any]:
        """Returns a copy of the bindings defined directly in this scope."""
        return self._bindings.copy()

    def __repr__(self) -> str:
        parent_id = id(self._parent) if self._parent else None
        return f"<SexpEnvironment id={id(self)} parent={parent_id} bindings={list(self._bindings.keys())}>"
