"""Builder for document attribute maps that never hold null values."""

from typing import Any, Self


class AttributeMap:
    """Accumulates filter, metadata or media fields, skipping nulls.

    Keys whose value is None are never written. Nested maps are built the
    same way and left out entirely when every nested value was None.

    Example:
        >>> AttributeMap().set("level", "beginner").set("category", None).nest(
        ...     "price", currency="USD", amount=None
        ... ).build()
        {'level': 'beginner', 'price': {'currency': 'USD'}}
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> Self:
        """Write key if value is not None."""
        if value is not None:
            self._values[key] = value
        return self

    def set_list(self, key: str, values: list[Any] | None) -> Self:
        """Write a list, dropping null entries. Empty lists are kept."""
        if values is not None:
            self._values[key] = [value for value in values if value is not None]
        return self

    def nest(self, key: str, **fields: Any) -> Self:
        """Write a nested map built from keyword fields."""
        nested = AttributeMap()
        for name, value in fields.items():
            nested.set(name, value)
        if nested:
            self._values[key] = nested.build()
        return self

    def __bool__(self) -> bool:
        return bool(self._values)

    def build(self) -> dict[str, Any]:
        """Return a copy of the accumulated map."""
        return dict(self._values)
