from __future__ import annotations

from dataclasses import dataclass, field

from asset_pipeline.parsing.types import DuplicateRow, InvalidRow, RowOutcome, ValidRecord


@dataclass
class ResultAccumulator:
    """
    Collects every row outcome of one import, in source row order.

    The lists are plain growable lists with no cap: a 100k-row upload keeps
    100k outcomes. `total` always equals the sum of their lengths.
    """
    valid: list[ValidRecord] = field(default_factory=list)
    invalid: list[InvalidRow] = field(default_factory=list)
    duplicates: list[DuplicateRow] = field(default_factory=list)
    total: int = 0             # rows added so far

    def add(self, outcome: RowOutcome) -> None:
        """Append `outcome` to its list. Outcomes are final once added."""
        if isinstance(outcome, ValidRecord):
            self.valid.append(outcome)
        elif isinstance(outcome, InvalidRow):
            self.invalid.append(outcome)
        elif isinstance(outcome, DuplicateRow):
            self.duplicates.append(outcome)
        else:
            raise TypeError(f"not a row outcome: {type(outcome).__name__}")
        self.total += 1
