"""Domain models for secret records, stores and search matches."""
import json
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple


class ValueKind(Enum):
    """Variant tag of a secret value."""
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"


def _number_text(number) -> str:
    """JSON number text with a bare exponent: 1e16, 1.5e-7."""
    text = json.dumps(number)
    mantissa, marker, exponent = text.partition("e")
    if not marker:
        return text
    sign = "-" if exponent.startswith("-") else ""
    return f"{mantissa}e{sign}{exponent.lstrip('+-').lstrip('0') or '0'}"


@dataclass(frozen=True)
class SecretValue:
    """
    One value stored under a key of a secret.

    Arrays and objects are opaque: they are kept whole and only ever
    rendered as a single serialized string.
    """
    kind: ValueKind
    data: Any

    @classmethod
    def from_json(cls, value: Any) -> "SecretValue":
        """Wrap a decoded JSON value in its tagged variant."""
        # bool is an int subclass, so it has to be checked first
        if isinstance(value, bool):
            return cls(ValueKind.BOOLEAN, value)
        if isinstance(value, str):
            return cls(ValueKind.TEXT, value)
        if isinstance(value, (int, float)):
            return cls(ValueKind.NUMBER, value)
        if value is None:
            return cls(ValueKind.NULL, None)
        if isinstance(value, list):
            return cls(ValueKind.ARRAY, value)
        if isinstance(value, dict):
            return cls(ValueKind.OBJECT, value)
        raise TypeError(f"Unsupported secret value type: {type(value).__name__}")

    def render(self) -> str:
        """
        Render the value as display text.

        Strings are returned untouched; every other variant uses its
        canonical compact JSON form (object keys sorted).
        """
        if self.kind is ValueKind.TEXT:
            return self.data
        if self.kind is ValueKind.NUMBER:
            return _number_text(self.data)
        return json.dumps(
            self.data,
            ensure_ascii=False,
            separators=(",", ":"),
            sort_keys=True,
        )

    def to_json(self) -> Any:
        return self.data


@dataclass(frozen=True)
class SecretRecord:
    """Parsed key-value contents of one secret, ordered by key."""
    identifier: str
    values: Mapping[str, SecretValue]

    def __post_init__(self):
        ordered = dict(sorted(self.values.items()))
        object.__setattr__(self, "values", MappingProxyType(ordered))

    @classmethod
    def from_mapping(cls, identifier: str, mapping: Mapping[str, Any]) -> "SecretRecord":
        values = {key: SecretValue.from_json(value) for key, value in mapping.items()}
        return cls(identifier=identifier, values=values)

    def __len__(self) -> int:
        return len(self.values)

    def items(self) -> Iterator[Tuple[str, SecretValue]]:
        return iter(self.values.items())

    def to_json(self) -> Dict[str, Any]:
        return {key: value.to_json() for key, value in self.values.items()}


class SecretStore:
    """
    Records keyed by secret identifier, iterated in identifier order.

    A later record with the same identifier replaces an earlier one.
    The store exposes no mutators once built.
    """

    def __init__(self, records: Iterable[SecretRecord] = ()):
        by_identifier = {}
        for record in records:
            by_identifier[record.identifier] = record
        self._records: Dict[str, SecretRecord] = dict(sorted(by_identifier.items()))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._records

    def __getitem__(self, identifier: str) -> SecretRecord:
        return self._records[identifier]

    def __iter__(self) -> Iterator[SecretRecord]:
        return iter(self._records.values())

    def identifiers(self) -> List[str]:
        return list(self._records)

    def to_json(self) -> Dict[str, Dict[str, Any]]:
        return {identifier: record.to_json() for identifier, record in self._records.items()}


class MatchKind(Enum):
    SECRET = "secret"
    KEY = "key"


@dataclass(frozen=True)
class Match:
    """One search hit, either on a secret identifier or on a key."""
    label: str
    display: str
    kind: MatchKind

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.label, "value": self.display}
