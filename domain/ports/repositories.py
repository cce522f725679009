from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import ShiftRecord, WeekLayout


class ShiftRecordRepository(Protocol):
    def load(self, path: Path) -> Sequence[ShiftRecord]: ...

    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, Sequence[ShiftRecord]]]: ...

    def save(self, records: Sequence[ShiftRecord], path: Path) -> None: ...


class LayoutRepository(Protocol):
    def save(self, layout: WeekLayout, path: Path) -> None: ...
