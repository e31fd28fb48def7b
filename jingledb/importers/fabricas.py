"""
Fabrica (episode) importer.

Reads ``node-Fabrica-YYYY-MM-DD.csv`` exports. Expected columns:
id:ID, title, date, youtubeUrl, visualizations:int, likes:int, description,
contents, status, createdAt, updatedAt.
"""

from jingledb.importers.base import BaseImporter, ImportResult, ImportRow, RowError, blank_to_none
from jingledb.normalizers import normalize_date, parse_int
from jingledb.schema import EntityStatus

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={id}"

UPSERT_QUERY = """
UNWIND $rows AS row
MERGE (f:Fabrica {id: row.id})
SET f.title = row.title,
    f.youtubeUrl = row.youtubeUrl,
    f.visualizations = row.visualizations,
    f.likes = row.likes,
    f.description = row.description,
    f.contents = row.contents,
    f.status = row.status
WITH f, row
SET f.createdAt = CASE
      WHEN row.createdAt IS NOT NULL THEN datetime(row.createdAt)
      WHEN f.createdAt IS NULL THEN datetime()
      ELSE f.createdAt
    END,
    f.updatedAt = CASE
      WHEN row.updatedAt IS NOT NULL THEN datetime(row.updatedAt)
      ELSE datetime()
    END,
    f.date = CASE
      WHEN row.date IS NOT NULL THEN datetime(row.date)
      ELSE f.date
    END
RETURN f.id AS id
"""


class FabricaImporter(BaseImporter):
    """Importer for Fabrica nodes, keyed by YouTube video ID."""

    label = "Fabrica"

    def parse_row(self, record: dict[str, str], row_number: int) -> ImportRow:
        fabrica_id = blank_to_none(record.get("id"))
        if not fabrica_id:
            raise RowError("Missing id field")

        properties = {
            "id": fabrica_id,
            "title": blank_to_none(record.get("title")),
            "date": normalize_date(record.get("date")),
            "youtubeUrl": blank_to_none(record.get("youtubeUrl")) or YOUTUBE_WATCH_URL.format(id=fabrica_id),
            "visualizations": parse_int(record.get("visualizations")),
            "likes": parse_int(record.get("likes")),
            "description": blank_to_none(record.get("description")),
            "contents": blank_to_none(record.get("contents")),
            "status": blank_to_none(record.get("status")) or EntityStatus.DRAFT.value,
            "createdAt": normalize_date(record.get("createdAt")),
            "updatedAt": normalize_date(record.get("updatedAt")),
        }
        return ImportRow(id=fabrica_id, properties=properties, row_number=row_number)

    def write_batch(self, rows: list[ImportRow], result: ImportResult) -> None:
        self.client.execute_query(UPSERT_QUERY, {"rows": [row.properties for row in rows]}, write=True)
