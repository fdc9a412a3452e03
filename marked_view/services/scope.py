# ABOUTME: Minimal view-model scope with explicit watchers and a deterministic digest loop.
# ABOUTME: Plays the host framework's change-detection role for the marked directive.

import ast
import logging
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

MAX_DIGEST_ITERATIONS = 10

# Literal spellings accepted in attribute expressions besides Python literals
_KEYWORD_LITERALS = {"true": True, "false": False, "null": None, "undefined": None}

_UNSET = object()

Expression = Union[str, Callable[["Scope"], Any], None]
Listener = Callable[[Any, Any], None]


class ScopeDigestError(RuntimeError):
    """Raised when watchers keep changing values after MAX_DIGEST_ITERATIONS passes."""


class _Watcher:
    def __init__(self, scope: "Scope", expression: Expression, listener: Listener):
        self.scope = scope
        self.expression = expression
        self.listener = listener
        self.last = _UNSET

    def check(self) -> bool:
        value = self.scope.eval(self.expression)
        if self.last is not _UNSET and value == self.last:
            return False
        old = None if self.last is _UNSET else self.last
        self.last = value
        self.listener(value, old)
        return True


class Scope:
    """A node in the scope tree.

    Non-isolated scopes read through to their parent; isolated scopes only see
    their own values. Assigning a value runs a digest from the root so every
    watcher in the tree sees the change.
    """

    def __init__(self, parent: Optional["Scope"] = None, isolate: bool = False, **values: Any):
        self.parent = parent
        self.isolate = isolate
        self._values: Dict[str, Any] = dict(values)
        self._watchers: List[_Watcher] = []
        self._children: List["Scope"] = []
        self._destroyed = False
        self._digesting = False

    def new(self, isolate: bool = False, **values: Any) -> "Scope":
        """Create a child scope."""
        child = Scope(parent=self, isolate=isolate, **values)
        self._children.append(child)
        return child

    @property
    def root(self) -> "Scope":
        scope = self
        while scope.parent is not None:
            scope = scope.parent
        return scope

    def __contains__(self, name: str) -> bool:
        if name in self._values:
            return True
        if self.parent is not None and not self.isolate:
            return name in self.parent
        return False

    def __getitem__(self, name: str) -> Any:
        if name in self._values:
            return self._values[name]
        if self.parent is not None and not self.isolate:
            return self.parent[name]
        raise KeyError(name)

    def get(self, name: str, default: Any = None) -> Any:
        try:
            return self[name]
        except KeyError:
            return default

    def __setitem__(self, name: str, value: Any):
        self._values[name] = value
        self.root.digest()

    def update(self, values: Dict[str, Any]):
        """Assign several values and run a single digest."""
        self._values.update(values)
        self.root.digest()

    def context(self) -> Dict[str, Any]:
        """Flattened view of every value visible from this scope."""
        if self.parent is not None and not self.isolate:
            merged = self.parent.context()
        else:
            merged = {}
        merged.update(self._values)
        return merged

    def eval(self, expression: Expression) -> Any:
        """
        Evaluate an attribute expression against this scope.

        Args:
            expression: A callable taking the scope, a literal (``'file.md'``, ``true``, ``3``),
                or a dotted name (``page.body``).

        Returns:
            The evaluated value, or None when a name cannot be resolved.
        """
        if expression is None:
            return None
        if callable(expression):
            return expression(self)

        expression = expression.strip()
        if not expression:
            return None
        if expression in _KEYWORD_LITERALS:
            return _KEYWORD_LITERALS[expression]
        try:
            return ast.literal_eval(expression)
        except (ValueError, SyntaxError):
            pass

        head, *rest = expression.split(".")
        value = self.get(head)
        for part in rest:
            if value is None:
                return None
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = getattr(value, part, None)
        return value

    def watch(self, expression: Expression, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with ``(new, old)`` whenever the expression changes.

        The listener fires immediately with the current value.

        Returns:
            A function that removes the watcher.
        """
        watcher = _Watcher(self, expression, listener)
        self._watchers.append(watcher)
        watcher.check()

        def deregister():
            if watcher in self._watchers:
                self._watchers.remove(watcher)

        return deregister

    def _check_watchers(self) -> bool:
        dirty = False
        for watcher in list(self._watchers):
            if watcher.check():
                dirty = True
        for child in list(self._children):
            if child._check_watchers():
                dirty = True
        return dirty

    def digest(self):
        """Run watchers on this scope and its descendants until values settle.

        Assignments made by listeners while a digest is running are picked up by
        the next pass of the running digest instead of starting a nested one.
        """
        if self._digesting:
            return
        self._digesting = True
        try:
            for _ in range(MAX_DIGEST_ITERATIONS):
                if not self._check_watchers():
                    return
        finally:
            self._digesting = False
        logger.error(f"Digest did not settle after {MAX_DIGEST_ITERATIONS} iterations")
        raise ScopeDigestError(f"{MAX_DIGEST_ITERATIONS} digest iterations reached, aborting")

    def destroy(self):
        if self._destroyed:
            return
        self._destroyed = True
        self._watchers.clear()
        for child in list(self._children):
            child.destroy()
        if self.parent is not None and self in self.parent._children:
            self.parent._children.remove(self)
