from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, List

from filelock import FileLock
from pydantic import TypeAdapter

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import ShiftRecord, WeekLayout
from domain.ports.repositories import LayoutRepository, ShiftRecordRepository

_RECORDS_ADAPTER = TypeAdapter(List[ShiftRecord])


def parse_records_payload(payload: Any) -> List[ShiftRecord]:
    """Accept a bare list of records or an object with a ``records`` list."""
    if isinstance(payload, dict):
        payload = payload.get("records", [])
    if not isinstance(payload, list):
        msg = "Shift records payload must be a list or an object with a 'records' list"
        raise ValueError(msg)
    return _RECORDS_ADAPTER.validate_python(payload)


def _locked_write(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    lock_path = path.with_suffix(f"{path.suffix}.lock")
    with FileLock(str(lock_path)):
        write_json_atomic(path, payload)


class FileSystemShiftRecordRepository(ShiftRecordRepository):
    def load(self, path: Path) -> List[ShiftRecord]:
        return parse_records_payload(load_json(path))

    def load_all_with_paths(self, directory: Path) -> List[tuple[Path, List[ShiftRecord]]]:
        return [(path, self.load(path)) for path in sorted(directory.glob("*.json"))]

    def save(self, records: Sequence[ShiftRecord], path: Path) -> None:
        _locked_write(path, {"records": [record.to_dict() for record in records]})


class FileSystemLayoutRepository(LayoutRepository):
    def save(self, layout: WeekLayout, path: Path) -> None:
        _locked_write(path, layout.to_dict())
