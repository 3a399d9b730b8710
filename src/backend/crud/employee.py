# src/backend/crud/employee.py
from __future__ import annotations

import os
import json
import logging
import tempfile
import threading
from pathlib import Path
from typing import List, Optional, Tuple, Union

from pydantic import ValidationError

from src.backend.schemas.employee import Employee, EmployeeUpdate
from src.backend.utils.exceptions import DuplicateEmployeeId, EmployeeNotFound, StorageError

logger = logging.getLogger(__name__)


class _Corrupt(Exception):
    pass


class RecordStore:
    """
    The full employee collection, kept as one JSON array on disk.

    Every mutation is read-modify-write of the whole file under a per-store
    lock, and the write goes through a temp file + os.replace so the file
    is never left truncated.
    """

    def __init__(self, data_file: Union[str, Path]):
        self.data_file = Path(data_file)
        self._lock = threading.Lock()

    # -------------------------
    # file helpers
    # -------------------------
    def _read(self) -> List[Employee]:
        """
        Raw read. Missing file -> []. Unreadable or malformed -> _Corrupt.
        """
        if not self.data_file.exists():
            return []
        try:
            raw = json.loads(self.data_file.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise ValueError(f"expected a JSON array, got {type(raw).__name__}")
            return [Employee.model_validate(item) for item in raw]
        except (OSError, ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            raise _Corrupt(str(e)) from e

    def _read_for_update(self) -> List[Employee]:
        try:
            return self._read()
        except _Corrupt as e:
            logger.error("Refusing to modify unreadable data file %s: %s", self.data_file, e)
            raise StorageError(f"Unreadable data file {self.data_file}") from e

    def _write(self, rows: List[Employee]) -> None:
        payload = json.dumps([r.model_dump() for r in rows], indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.data_file.parent, prefix=f".{self.data_file.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.data_file)
        except OSError as e:
            logger.exception("Failed to write data file %s: %s", self.data_file, e)
            if tmp_name and os.path.exists(tmp_name):
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_name)
            raise StorageError(f"Could not write data file {self.data_file}") from e

    @staticmethod
    def _index(rows: List[Employee], emp_id: str) -> int:
        for i, row in enumerate(rows):
            if row.id == emp_id:
                return i
        return -1

    # -------------------------
    # Listing / Single
    # -------------------------
    def list_all(self) -> List[Employee]:
        with self._lock:
            try:
                return self._read()
            except _Corrupt as e:
                logger.warning("Data file %s is unreadable, treating as empty: %s", self.data_file, e)
                return []

    def get_by_id(self, emp_id: str) -> Employee:
        for row in self.list_all():
            if row.id == emp_id:
                return row
        raise EmployeeNotFound()

    def exists(self, emp_id: str) -> bool:
        return any(row.id == emp_id for row in self.list_all())

    def find_for_update(self, emp_id: str) -> Optional[Employee]:
        """
        Lookup ahead of a mutation. Unlike get_by_id, an unreadable data file
        raises StorageError here instead of looking like "no such employee".
        """
        with self._lock:
            rows = self._read_for_update()
        idx = self._index(rows, emp_id)
        return rows[idx] if idx != -1 else None

    def is_photo_referenced(self, photo: str) -> bool:
        if not photo:
            return False
        return any(row.photo == photo for row in self.list_all())

    # -------------------------
    # Create / Update / Delete
    # -------------------------
    def insert(self, record: Employee) -> Employee:
        with self._lock:
            rows = self._read_for_update()
            if self._index(rows, record.id) != -1:
                raise DuplicateEmployeeId()

            rows.append(record)
            self._write(rows)

        logger.info("Employee %s created", record.id)
        return record

    def update(
        self,
        emp_id: str,
        fields: EmployeeUpdate,
        photo: Optional[str] = None,
    ) -> Tuple[Employee, Employee]:
        """
        Overwrite name/mobile/address, and photo only when a new reference is
        given. Returns (updated, previous); the caller removes previous.photo
        once it is no longer referenced.
        """
        with self._lock:
            rows = self._read_for_update()
            idx = self._index(rows, emp_id)
            if idx == -1:
                raise EmployeeNotFound()

            previous = rows[idx]
            updated = previous.model_copy(
                update={
                    "name": fields.name,
                    "mobile": fields.mobile,
                    "address": fields.address,
                    "photo": photo if photo else previous.photo,
                }
            )
            rows[idx] = updated
            self._write(rows)

        logger.info("Employee %s updated", emp_id)
        return updated, previous

    def delete(self, emp_id: str) -> Employee:
        with self._lock:
            rows = self._read_for_update()
            idx = self._index(rows, emp_id)
            if idx == -1:
                raise EmployeeNotFound()

            removed = rows.pop(idx)
            self._write(rows)

        logger.info("Employee %s deleted", emp_id)
        return removed
