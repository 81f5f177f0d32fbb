from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from asset_pipeline.parsing.registry import CategorySpec
from asset_pipeline.parsing.types import CompositeKey


@dataclass(frozen=True)
class ExistingRecordIndex:
    """
    Snapshot of a category's persisted records, keyed by composite business key.

    Built once per import from a single bulk read and never mutated afterwards:
    rows accepted during the same import are not added.
    """
    by_key: Mapping[CompositeKey, Mapping[str, Any]]

    @classmethod
    def build(cls, spec: CategorySpec, records: Iterable[Mapping[str, Any]]) -> ExistingRecordIndex:
        """
        Index `records` by `spec.composite_key`.

        Two records sharing a key is not an error: the later one in input order wins.
        """
        by_key: dict[CompositeKey, Mapping[str, Any]] = {}
        for r in records:
            by_key[spec.composite_key(r)] = r
        return cls(by_key=by_key)

    def contains(self, key: CompositeKey) -> bool:
        return key in self.by_key

    def get(self, key: CompositeKey) -> Mapping[str, Any] | None:
        return self.by_key.get(key)

    def __len__(self) -> int:
        return len(self.by_key)
