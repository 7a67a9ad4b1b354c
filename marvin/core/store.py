"""
Файловое хранилище результатов проверок.

Одна запись = один JSON-файл <results_dir>/<id>.json.

Используем:
- временный файл + os.link для публикации (link не перезаписывает существующий файл)
- суффикс -2, -3, ... при коллизии идентификатора
- asyncio.to_thread для файлового I/O
"""

import asyncio
import json
import logging
import os
import re
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from marvin.core.errors import NotFound, StoreUnavailable
from marvin.core.types import CheckerKind, ResultRecord, StoredResult

logger = logging.getLogger(__name__)

ID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]*$")
RECORD_SUFFIX = ".json"


@dataclass
class ResultPage:
    """Страница результатов list()."""

    records: List[StoredResult]
    total: int
    skipped: int = 0


@dataclass
class _Scan:
    records: List[StoredResult] = field(default_factory=list)
    skipped: int = 0


def make_base_id(record: ResultRecord) -> str:
    """Идентификатор из имени checker'а и времени создания (микросекунды)."""
    return f"{record.checker.value}-{record.timestamp.strftime('%Y%m%d-%H%M%S-%f')}"


class ResultStore:
    """Хранилище Result Record'ов в каталоге на диске."""

    def __init__(self, results_dir: "str | Path"):
        self.results_dir = Path(results_dir)

    def initialize(self) -> "ResultStore":
        """Один раз зафиксировать абсолютный путь каталога."""
        self.results_dir = self.results_dir.expanduser().resolve()
        logger.info(f"Result store at {self.results_dir}")
        return self

    # ==================== Write ====================

    async def save(self, record: ResultRecord) -> str:
        """Сохранить запись и вернуть новый уникальный идентификатор."""
        return await asyncio.to_thread(self._save_sync, record)

    def _save_sync(self, record: ResultRecord) -> str:
        payload = json.dumps(record.to_dict(), indent=2, ensure_ascii=False)
        base_id = make_base_id(record)

        try:
            self.results_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = self.results_dir / f".{base_id}.{uuid.uuid4().hex}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())

            try:
                attempt = 1
                while True:
                    record_id = base_id if attempt == 1 else f"{base_id}-{attempt}"
                    try:
                        # link атомарен и падает, если имя уже занято
                        os.link(tmp_path, self._path_for(record_id))
                        break
                    except FileExistsError:
                        attempt += 1
            finally:
                tmp_path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreUnavailable(str(self.results_dir), e) from e

        logger.info(f"Saved result {record_id} ({record.summary.total_issues} issues)")
        return record_id

    # ==================== Read ====================

    async def get_by_id(self, record_id: str) -> ResultRecord:
        """Прочитать запись. NotFound для несуществующих и некорректных id."""
        return await asyncio.to_thread(self._get_sync, record_id)

    def _get_sync(self, record_id: str) -> ResultRecord:
        if not isinstance(record_id, str) or not ID_PATTERN.match(record_id):
            raise NotFound(str(record_id))

        path = self._path_for(record_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise NotFound(record_id) from None
        except OSError as e:
            raise StoreUnavailable(str(self.results_dir), e) from e

        try:
            return ResultRecord.from_dict(json.loads(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Result {record_id} is corrupt: {e}")
            raise NotFound(record_id) from None

    async def list(
        self,
        checker: Optional[CheckerKind] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ResultPage:
        """
        Страница записей, новые первые.

        total — число записей, подходящих под фильтр, до пагинации.
        Битые файлы пропускаются (и логируются) всегда, их число в skipped.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")

        scan = await asyncio.to_thread(self._scan_sync, checker)
        return ResultPage(
            records=scan.records[offset:offset + limit],
            total=len(scan.records),
            skipped=scan.skipped,
        )

    async def list_all(self, checker: Optional[CheckerKind] = None) -> Tuple[List[StoredResult], int]:
        """Все читаемые записи (новые первые) и число пропущенных битых."""
        scan = await asyncio.to_thread(self._scan_sync, checker)
        return scan.records, scan.skipped

    def _scan_sync(self, checker: Optional[CheckerKind]) -> _Scan:
        scan = _Scan()
        try:
            entries = sorted(os.listdir(self.results_dir))
        except FileNotFoundError:
            # Ещё ничего не запускали
            return scan
        except OSError as e:
            raise StoreUnavailable(str(self.results_dir), e) from e

        for name in entries:
            if name.startswith(".") or not name.endswith(RECORD_SUFFIX):
                continue
            record_id = name[: -len(RECORD_SUFFIX)]
            try:
                record = ResultRecord.from_dict(
                    json.loads((self.results_dir / name).read_text(encoding="utf-8"))
                )
            except (OSError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable result {name}: {e}")
                scan.skipped += 1
                continue

            if checker is None or record.checker is checker:
                scan.records.append(StoredResult(id=record_id, record=record))

        scan.records.sort(key=lambda r: (r.record.timestamp, r.id), reverse=True)
        return scan

    def _path_for(self, record_id: str) -> Path:
        return self.results_dir / f"{record_id}{RECORD_SUFFIX}"
