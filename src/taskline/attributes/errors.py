"""Per-attribute error collection filled during validation."""

from __future__ import annotations

from collections.abc import Iterator


class Errors:
    """Attribute name → ordered, de-duplicated messages.

    Examples:
        >>> errors = Errors()
        >>> errors.add("email", "cannot be empty")
        >>> errors.add("email", "is an invalid format")
        >>> str(errors)
        'email cannot be empty. email is an invalid format'
    """

    def __init__(self) -> None:
        self.messages: dict[str, dict[str, None]] = {}

    def add(self, attribute: str, message: str | None) -> None:
        if not message:
            return
        self.messages.setdefault(attribute, {})[message] = None

    def has(self, attribute: str) -> bool:
        return bool(self.messages.get(attribute))

    def __contains__(self, attribute: object) -> bool:
        return self.has(attribute)  # type: ignore[arg-type]

    def __bool__(self) -> bool:
        return any(self.messages.values())

    def __len__(self) -> int:
        return sum(len(messages) for messages in self.messages.values())

    def __iter__(self) -> Iterator[tuple[str, str]]:
        for attribute, messages in self.messages.items():
            for message in messages:
                yield attribute, message

    @property
    def is_empty(self) -> bool:
        return not self

    def full_messages(self) -> list[str]:
        return [f"{attribute} {message}" for attribute, message in self]

    def to_dict(self) -> dict[str, list[str]]:
        return {attribute: list(messages) for attribute, messages in self.messages.items()}

    def __str__(self) -> str:
        return ". ".join(self.full_messages())

    def __repr__(self) -> str:
        return f"<Errors {self.to_dict()!r}>"


__all__ = ["Errors"]
