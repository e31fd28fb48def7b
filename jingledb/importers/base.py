"""
Base importer class for CSV node exports.

All entity importers inherit from BaseImporter and implement the row parsing
and batch write steps.
"""

import csv
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from jingledb.config import settings
from jingledb.database import get_client


class RowError(ValueError):
    """Raised when a CSV row cannot be imported."""
    pass


class DuplicateRowError(RowError):
    """Raised when a CSV row duplicates data already in the graph."""
    pass


@dataclass
class ImportRow:
    """A parsed CSV row ready to be written."""
    id: str
    properties: dict[str, Any]
    row_number: int


@dataclass
class ImportResult:
    """Result of an import run."""
    entity: str
    source_file: str
    success: bool = False
    rows_total: int = 0
    imported: int = 0
    updated: int = 0
    errors: int = 0
    duplicates_skipped: int = 0
    relationships_created: int = 0
    error_messages: list[str] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        """Calculate duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


def resolve_import_path(path: Path | str) -> Path:
    """Resolve a bare filename against the configured import directory."""
    path = Path(path)
    if path.is_absolute() or path.exists():
        return path
    return settings.importer.import_dir / path


def clean_header(header: str) -> str:
    """Drop admin-import type suffixes: ``likes:int`` -> ``likes``, ``id:ID`` -> ``id``."""
    return header.split(":", 1)[0].strip()


def read_csv_records(path: Path) -> list[dict[str, str]]:
    """
    Read a CSV export into dicts keyed by cleaned header.

    Blank lines are skipped and extra columns are ignored. When a typed and an
    untyped header name the same field, the first non-empty value wins.
    """
    records = []
    with open(path, newline="", encoding="utf-8-sig") as f:
        for raw in csv.DictReader(f):
            record: dict[str, str] = {}
            for key, value in raw.items():
                if key is None:
                    continue  # overflow columns
                name = clean_header(key)
                if not record.get(name):
                    record[name] = (value or "").strip()
            if any(record.values()):
                records.append(record)
    return records


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class BaseImporter(ABC):
    """
    Abstract base class for CSV node importers.

    Subclasses must implement:
    - parse_row(): Turn one CSV record into an ImportRow
    - write_batch(): Upsert a batch of rows into the graph
    """

    # Class attributes to be set by subclasses
    label: str = None           # e.g., "Fabrica"

    def __init__(self, client=None, batch_size: int = None):
        """
        Initialize the importer.

        Args:
            client: GraphClient (optional, the shared client is used if not provided)
            batch_size: Rows per write transaction
        """
        if self.label is None:
            raise ValueError("label must be set in subclass")

        self.client = client or get_client()
        self.batch_size = batch_size or settings.importer.batch_size

    @abstractmethod
    def parse_row(self, record: dict[str, str], row_number: int) -> ImportRow:
        """
        Parse one CSV record.

        Raises:
            RowError: If the row is invalid
            DuplicateRowError: If the row duplicates existing graph data
        """
        pass

    @abstractmethod
    def write_batch(self, rows: list[ImportRow], result: ImportResult) -> None:
        """Upsert a batch of parsed rows."""
        pass

    def existing_ids(self, ids: list[str]) -> set[str]:
        """Return the subset of ids already present under this importer's label."""
        query = f"UNWIND $ids AS id MATCH (n:{self.label} {{id: id}}) RETURN n.id AS id"
        return {row["id"] for row in self.client.execute_query(query, {"ids": ids})}

    def _parse_batch(self, batch: list[dict[str, str]], first_row: int, result: ImportResult) -> list[ImportRow]:
        rows = []
        for offset, record in enumerate(batch):
            row_number = first_row + offset
            try:
                rows.append(self.parse_row(record, row_number))
            except DuplicateRowError as e:
                result.duplicates_skipped += 1
                logger.warning(f"Row {row_number}: {e}, skipping")
            except RowError as e:
                result.errors += 1
                result.error_messages.append(f"Row {row_number}: {e}")
                logger.warning(f"Row {row_number}: {e}, skipping")
            except Exception as e:
                result.errors += 1
                result.error_messages.append(f"Row {row_number}: {type(e).__name__}: {e}")
                logger.error(f"Row {row_number}: unexpected error: {e}")
        return rows

    def run(self, path: Path | str) -> ImportResult:
        """
        Run the full import.

        Args:
            path: CSV file, absolute or relative to the import directory

        Returns:
            ImportResult with statistics

        Raises:
            FileNotFoundError: If the CSV file does not exist
        """
        path = resolve_import_path(path)
        if not path.is_file():
            raise FileNotFoundError(
                f"File not found: {path} (place CSV exports in {settings.importer.import_dir})"
            )

        result = ImportResult(
            entity=self.label,
            source_file=str(path),
            started_at=datetime.now(timezone.utc),
        )

        try:
            records = read_csv_records(path)
            result.rows_total = len(records)
            logger.info(f"Found {len(records)} {self.label} rows in {path.name}")

            for start in range(0, len(records), self.batch_size):
                batch = records[start:start + self.batch_size]
                batch_number = start // self.batch_size + 1
                logger.info(
                    f"Processing batch {batch_number} "
                    f"(rows {start + 1}-{start + len(batch)})"
                )

                # +2: header line and 1-based numbering
                rows = self._parse_batch(batch, start + 2, result)
                if not rows:
                    logger.info("No valid rows in this batch, skipping")
                    continue

                try:
                    existing = self.existing_ids([row.id for row in rows])
                    self.write_batch(rows, result)
                except Exception as e:
                    result.errors += len(rows)
                    result.error_messages.append(f"Batch {batch_number}: {e}")
                    logger.error(f"Error importing batch {batch_number}: {e}")
                    continue

                for row in rows:
                    if row.id in existing:
                        result.updated += 1
                    else:
                        result.imported += 1

                logger.info(f"Processed {len(rows)} {self.label} rows")

            result.success = result.errors == 0

        finally:
            result.completed_at = datetime.now(timezone.utc)
            logger.info(
                f"Import complete: {result.imported} new, {result.updated} updated, "
                f"{result.errors} errors, {result.duration_seconds:.1f}s"
            )

        return result
