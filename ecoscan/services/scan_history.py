import json
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..models import RecyclabilityVerdict, ScanRecord


class ScanHistoryStore:
    """One JSON file per scan under ``directory``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, scan_id: str) -> Optional[Path]:
        # ids are uuid4 strings; anything else cannot name a stored file
        try:
            if str(uuid.UUID(scan_id)) != scan_id:
                return None
        except ValueError:
            return None
        return self.directory / f"{scan_id}.json"

    def add(self, result: RecyclabilityVerdict, device_name: Optional[str] = None,
            device_type: Optional[str] = None) -> ScanRecord:
        record = ScanRecord(
            id=str(uuid.uuid4()),
            device_name=device_name or device_type or "Unknown Device",
            device_type=device_type,
            created_at=datetime.now(timezone.utc),
            result=result,
        )
        # write then rename so a crash never leaves a half-written record
        fd, tmp = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record.model_dump(mode="json", by_alias=True), f, indent=2, ensure_ascii=False)
            os.replace(tmp, self._path(record.id))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        return record

    def get(self, scan_id: str) -> Optional[ScanRecord]:
        fp = self._path(scan_id)
        if fp is None or not fp.exists():
            return None
        try:
            with fp.open("r", encoding="utf-8") as f:
                return ScanRecord.model_validate(json.load(f))
        except (OSError, ValueError):
            return None

    def list_scans(self) -> List[ScanRecord]:
        items = []
        for fp in self.directory.glob("*.json"):
            try:
                with fp.open("r", encoding="utf-8") as f:
                    items.append(ScanRecord.model_validate(json.load(f)))
            except (OSError, ValueError):
                continue
        items.sort(key=lambda r: r.created_at, reverse=True)
        return items

    def delete(self, scan_id: str) -> bool:
        """Remove a record, including one that can no longer be parsed."""
        fp = self._path(scan_id)
        if fp is None or not fp.exists():
            return False
        fp.unlink()
        return True
