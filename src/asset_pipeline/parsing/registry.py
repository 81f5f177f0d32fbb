from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .schema import RowValidator
from .types import CompositeKey


class RecordCategory(str, Enum):
    """Closed set of record categories sharing the import pipeline."""
    software = "software"
    cyber = "cyber"
    data_content = "data_content"


class UnknownCategoryError(ValueError):
    """Raised when a category name has no registered descriptor."""


@dataclass(frozen=True)
class CategorySpec:
    """
    Everything the generic pipeline needs to know about one category.

    - `columns` are positional: sheet column N maps to `columns[N]`.
    - `key_fields` form the composite business key, in order.
    - `table_name` is a whitelisted identifier, never derived from user input.
    """
    category: RecordCategory
    label: str
    table_name: str
    columns: tuple[str, ...]
    key_fields: tuple[str, ...]
    validator: RowValidator
    example_row: tuple[Any, ...] = ()       # sample data row written into templates

    def composite_key(self, values: Mapping[str, Any]) -> CompositeKey:
        """Ordered key tuple. No normalization: equality is exact-string per component."""
        return tuple("" if values.get(f) is None else str(values.get(f)) for f in self.key_fields)


def get_category_spec(category: RecordCategory | str) -> CategorySpec:
    """
    A registry that assigns a category its descriptor. `FieldSpec` and `RowRule`
    define validation rules inside the profile modules.
    """
    try:
        category = RecordCategory(category)
    except ValueError:
        raise UnknownCategoryError(f"Unknown category: {category}") from None

    if category is RecordCategory.software:
        from .profiles.software import SOFTWARE_SPEC
        return SOFTWARE_SPEC

    if category is RecordCategory.cyber:
        from .profiles.cyber import CYBER_SPEC
        return CYBER_SPEC

    if category is RecordCategory.data_content:
        from .profiles.data_content import DATA_CONTENT_SPEC
        return DATA_CONTENT_SPEC

    raise UnknownCategoryError(f"Unknown category: {category}")
