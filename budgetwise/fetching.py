"""Declarative data loading for Streamlit pages.

Pages describe *what* they need (a name, a fetch callable, and the values
the result depends on) and :class:`DataLoader` decides whether to call the
backend.  Results live in the session state so reruns reuse them; a result
is refetched only when its dependencies change or it was invalidated after
a mutation.

Each request takes a generation number.  A response that comes back after
a newer request for the same name was issued is dropped, so a slow answer
for an old filter can never overwrite the answer for the current one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable, MutableMapping, Optional, Tuple

try:
    from .api_client import ApiError, AuthenticationError
except ImportError:
    from api_client import ApiError, AuthenticationError

logger = logging.getLogger(__name__)

STATE_PREFIX = '_budgetwise_fetch:'


@dataclass(frozen=True)
class FetchResult:
    data: Any = None
    error: Optional[str] = None
    deps: Tuple[Hashable, ...] = ()
    generation: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


class DataLoader:
    """Fetch-with-dependencies cache over a session state mapping."""

    def __init__(self, state: MutableMapping[str, Any]):
        self._state = state

    def _result_key(self, name: str) -> str:
        return f"{STATE_PREFIX}{name}"

    def _generation_key(self, name: str) -> str:
        return f"{STATE_PREFIX}{name}:generation"

    def current(self, name: str) -> Optional[FetchResult]:
        result = self._state.get(self._result_key(name))
        return result if isinstance(result, FetchResult) else None

    def begin(self, name: str) -> int:
        """Reserve a new generation number for a request of ``name``."""
        generation = int(self._state.get(self._generation_key(name), 0)) + 1
        self._state[self._generation_key(name)] = generation
        return generation

    def commit(self, name: str, result: FetchResult) -> bool:
        """Store ``result`` unless a newer request for ``name`` has started.

        Returns:
            True when the result was stored, False when it was stale.
        """
        latest = int(self._state.get(self._generation_key(name), 0))
        if result.generation < latest:
            logger.debug(
                "Discarding stale %s response (generation %d < %d)",
                name, result.generation, latest,
            )
            return False
        self._state[self._result_key(name)] = result
        return True

    def load(
        self,
        name: str,
        fetch: Callable[[], Any],
        deps: Tuple[Hashable, ...] = (),
        default: Any = None,
    ) -> FetchResult:
        """Return the stored result for ``name``, fetching when ``deps`` changed.

        Backend failures are captured on the result (``error``) with
        ``default`` as data; they are not raised.  Authentication failures
        are the exception: they propagate so the page can end the session.
        """
        deps = tuple(deps)
        cached = self.current(name)
        if cached is not None and cached.deps == deps:
            return cached

        generation = self.begin(name)
        try:
            result = FetchResult(data=fetch(), deps=deps, generation=generation)
        except AuthenticationError:
            raise
        except ApiError as e:
            result = FetchResult(data=default, error=e.message, deps=deps, generation=generation)

        if not self.commit(name, result):
            return self.current(name) or result
        return result

    def invalidate(self, name: str) -> None:
        """Forget ``name`` so the next :meth:`load` refetches it."""
        self._state.pop(self._result_key(name), None)

    def invalidate_all(self) -> None:
        for key in [k for k in self._state.keys() if str(k).startswith(STATE_PREFIX) and not str(k).endswith(':generation')]:
            self._state.pop(key, None)
