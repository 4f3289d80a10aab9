from typing import Iterable, List, Optional

from ..models.enums import BloodGroup
from .errors import InvalidBloodType


def canonicalize(label: Optional[str]) -> str:
    """Trim whitespace and uppercase. Empty input comes back empty."""
    return (label or "").strip().upper()


class TypeCatalog:
    def __init__(self, extra_types: Iterable[str] = ()):
        types = [bg.value for bg in BloodGroup]
        for label in extra_types:
            label = canonicalize(label)
            if label and label not in types:
                types.append(label)
        self._types = types
        self._lookup = frozenset(types)

    @property
    def types(self) -> List[str]:
        return list(self._types)

    def canonicalize(self, label: Optional[str]) -> str:
        return canonicalize(label)

    def is_valid(self, label: Optional[str]) -> bool:
        return canonicalize(label) in self._lookup

    def require(self, label: Optional[str]) -> str:
        """Canonicalize and validate, raising InvalidBloodType on unknown labels."""
        canonical = canonicalize(label)
        if canonical not in self._lookup:
            raise InvalidBloodType(label or "")
        return canonical
