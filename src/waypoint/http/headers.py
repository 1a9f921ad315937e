"""Case-insensitive HTTP headers.

``Headers`` is the read-only request side, built once from the ASGI
scope's byte pairs. ``ResponseHeaders`` is the mutable response side
written by middleware through ``ctx.set()``.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Read-only request headers keyed by lower-cased name.

    Indexing returns the first value sent for a name; ``get_list`` returns
    every value in arrival order.
    """

    __slots__ = ("_values",)

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        values: dict[str, list[str]] = {}
        for name, value in raw:
            values.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        self._values = values

    def __getitem__(self, name: str) -> str:
        return self._values[name.lower()][0]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Headers({self._values!r})"

    def get(self, name: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._values.get(name.lower())
        return values[0] if values else default

    def get_list(self, name: str) -> list[str]:
        return list(self._values.get(name.lower(), ()))


class ResponseHeaders:
    """Mutable response headers keyed case-insensitively.

    ``set`` replaces every existing value for the name; ``append`` adds
    another one (e.g. a second ``Set-Cookie``). Names keep the casing they
    were first set with.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[tuple[str, str]] = []

    def set(self, name: str, value: str) -> None:
        self.remove(name)
        self._items.append((name, value))

    def append(self, name: str, value: str) -> None:
        self._items.append((name, value))

    def get(self, name: str, default: str | None = None) -> str | None:
        lower = name.lower()
        for key, value in self._items:
            if key.lower() == lower:
                return value
        return default

    def remove(self, name: str) -> None:
        lower = name.lower()
        self._items = [(k, v) for k, v in self._items if k.lower() != lower]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ResponseHeaders({self._items!r})"
