"""Static receiver -> sender routing table."""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple


class FriendDirectory:
    """Immutable lookup of the one sender a receiver may pick up from."""

    def __init__(self, routes: Mapping[str, str]):
        self._routes = MappingProxyType(dict(routes))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "FriendDirectory":
        """Build a directory where each pair can send to the other.

        Routing is one-to-one: an id may belong to a single pair only.

        Raises:
            ValueError: an id is paired with itself or appears in two pairs.
        """
        routes = {}
        for a, b in pairs:
            if a == b:
                raise ValueError(f"Cannot pair {a!r} with itself")
            for member in (a, b):
                if member in routes:
                    raise ValueError(f"{member!r} already paired with {routes[member]!r}")
            routes[a] = b
            routes[b] = a
        return cls(routes)

    def resolve_sender(self, receiver_id: str) -> Optional[str]:
        return self._routes.get(receiver_id)

    @property
    def routes(self) -> Mapping[str, str]:
        return self._routes

    def __len__(self) -> int:
        return len(self._routes)
