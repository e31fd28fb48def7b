"""
Jingle importer.

Reads ``node-Jingle-YYYY-MM-DD.csv`` exports, upserts Jingle nodes, links each
one to its Fabrica through APPEARS_IN and renumbers the ``order`` of every
Fabrica it touched.
"""

from loguru import logger

from jingledb.appearances import fabrica_exists, update_appearance_order
from jingledb.ids import EntityKind, generate_unique_id
from jingledb.importers.base import (
    BaseImporter,
    DuplicateRowError,
    ImportResult,
    ImportRow,
    RowError,
    blank_to_none,
)
from jingledb.normalizers import normalize_date, parse_boolean, timestamp_to_seconds
from jingledb.schema import EntityStatus

BOOLEAN_FIELDS = ("isJinglazo", "isJinglazoDelDia", "isLive", "isPrecario", "isRepeat")

DUPLICATE_APPEARANCE_QUERY = """
MATCH (j:Jingle)-[r:APPEARS_IN]->(f:Fabrica {id: $fabricaId})
WHERE r.timestamp = $timestamp
RETURN j.id AS jingleId LIMIT 1
"""

UPSERT_QUERY = """
UNWIND $rows AS row
MERGE (j:Jingle {id: row.id})
SET j.title = row.title,
    j.comment = row.comment,
    j.timestamp = row.timestamp,
    j.songTitle = row.songTitle,
    j.artistName = row.artistName,
    j.genre = row.genre,
    j.isJinglazo = row.isJinglazo,
    j.isJinglazoDelDia = row.isJinglazoDelDia,
    j.isLive = row.isLive,
    j.isPrecario = row.isPrecario,
    j.isRepeat = row.isRepeat,
    j.status = row.status,
    j.fabricaId = row.fabricaId,
    j.fabricaDate = CASE WHEN row.fabricaDate IS NOT NULL THEN datetime(row.fabricaDate) ELSE null END,
    j.cancionId = row.cancionId
WITH j, row
SET j.createdAt = CASE
      WHEN row.createdAt IS NOT NULL THEN datetime(row.createdAt)
      WHEN j.createdAt IS NULL THEN datetime()
      ELSE j.createdAt
    END,
    j.updatedAt = CASE
      WHEN row.updatedAt IS NOT NULL THEN datetime(row.updatedAt)
      ELSE datetime()
    END
RETURN j.id AS id
"""

APPEARS_IN_QUERY = """
MATCH (j:Jingle {id: $jingleId}), (f:Fabrica {id: $fabricaId})
MERGE (j)-[r:APPEARS_IN]->(f)
SET r.timestamp = $timestamp,
    r.createdAt = CASE WHEN r.createdAt IS NULL THEN datetime() ELSE r.createdAt END
WITH j, f, r
SET j.fabricaId = f.id,
    j.fabricaDate = f.date,
    j.updatedAt = datetime()
RETURN j.id AS jingleId
"""

class JingleImporter(BaseImporter):
    """Importer for Jingle nodes and their APPEARS_IN relationships."""

    label = "Jingle"

    def parse_row(self, record: dict[str, str], row_number: int) -> ImportRow:
        title = blank_to_none(record.get("title"))
        comment = blank_to_none(record.get("comment"))
        if not title and not comment:
            raise RowError("Missing both title and comment")

        timestamp = timestamp_to_seconds(record.get("timestamp"))
        fabrica_id = blank_to_none(record.get("fabricaId"))

        # Checked before an ID is generated so skipped rows cost no lookups
        if fabrica_id and self.client.execute_query(
            DUPLICATE_APPEARANCE_QUERY, {"fabricaId": fabrica_id, "timestamp": timestamp}
        ):
            raise DuplicateRowError(
                f"Duplicate APPEARS_IN relationship (fabricaId: {fabrica_id}, timestamp: {timestamp})"
            )

        jingle_id = blank_to_none(record.get("id")) or generate_unique_id(self.client, EntityKind.JINGLE)

        properties = {
            "id": jingle_id,
            "title": title,
            "comment": comment,
            "timestamp": timestamp,
            "songTitle": blank_to_none(record.get("songTitle")),
            "artistName": blank_to_none(record.get("artistName")),
            "genre": blank_to_none(record.get("genre")),
            "status": blank_to_none(record.get("status")) or EntityStatus.DRAFT.value,
            "fabricaId": fabrica_id,
            "fabricaDate": normalize_date(record.get("fabricaDate")),
            "cancionId": blank_to_none(record.get("cancionId")),
            "createdAt": normalize_date(record.get("createdAt")),
            "updatedAt": normalize_date(record.get("updatedAt")),
        }
        for name in BOOLEAN_FIELDS:
            properties[name] = parse_boolean(record.get(name))

        return ImportRow(id=jingle_id, properties=properties, row_number=row_number)

    def write_batch(self, rows: list[ImportRow], result: ImportResult) -> None:
        self.client.execute_query(UPSERT_QUERY, {"rows": [row.properties for row in rows]}, write=True)

        touched = []
        for row in rows:
            fabrica_id = row.properties["fabricaId"]
            timestamp = row.properties["timestamp"]
            # A zero timestamp means the position is unknown
            if not fabrica_id or not timestamp:
                continue
            if not fabrica_exists(self.client, fabrica_id):
                logger.warning(f"Fabrica {fabrica_id} not found, skipping APPEARS_IN for Jingle {row.id}")
                continue

            self.client.execute_query(
                APPEARS_IN_QUERY,
                {"jingleId": row.id, "fabricaId": fabrica_id, "timestamp": timestamp},
                write=True,
            )
            result.relationships_created += 1
            if fabrica_id not in touched:
                touched.append(fabrica_id)

        for fabrica_id in touched:
            update_appearance_order(self.client, fabrica_id)
