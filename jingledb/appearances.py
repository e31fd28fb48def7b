"""
APPEARS_IN ordering.

Each APPEARS_IN relationship carries an ``order``: the 1-based position of the
Jingle inside its Fabrica, by ascending ``timestamp`` (seconds). The importer
renumbers the Fabricas it touches; ``reorder_all_appearances`` rebuilds every
Fabrica after bulk edits or migrations.
"""

from dataclasses import dataclass, field

from loguru import logger

from jingledb.normalizers import seconds_to_timestamp

FABRICA_EXISTS_QUERY = "MATCH (f:Fabrica {id: $fabricaId}) RETURN f.id AS id LIMIT 1"

FABRICAS_WITH_APPEARANCES_QUERY = """
MATCH (f:Fabrica)
WHERE EXISTS { MATCH (:Jingle)-[:APPEARS_IN]->(f) }
RETURN f.id AS id
ORDER BY id ASC
"""

TIMESTAMP_CONFLICTS_QUERY = """
MATCH (j:Jingle)-[r:APPEARS_IN]->(:Fabrica {id: $fabricaId})
WITH r.timestamp AS timestamp, collect(j.id) AS jingleIds
WHERE size(jingleIds) > 1
RETURN timestamp, jingleIds
ORDER BY timestamp ASC
"""

# Ties on timestamp are broken by element id
REORDER_QUERY = """
MATCH (:Jingle)-[r:APPEARS_IN]->(f:Fabrica {id: $fabricaId})
WITH r ORDER BY r.timestamp ASC, elementId(r) ASC
WITH collect(r) AS rels
UNWIND range(0, size(rels) - 1) AS idx
WITH rels[idx] AS r, idx + 1 AS position
SET r.order = position
RETURN count(r) AS updated
"""


@dataclass
class ReorderSummary:
    """Outcome of renumbering every Fabrica."""
    fabricas: int = 0
    succeeded: int = 0
    relationships: int = 0
    conflicts: int = 0
    failed: list[str] = field(default_factory=list)


def fabrica_exists(client, fabrica_id: str) -> bool:
    return bool(client.execute_query(FABRICA_EXISTS_QUERY, {"fabricaId": fabrica_id}))


def warn_timestamp_conflicts(client, fabrica_id: str) -> int:
    """Log every timestamp shared by several Jingles of one Fabrica; returns how many."""
    conflicts = client.execute_query(TIMESTAMP_CONFLICTS_QUERY, {"fabricaId": fabrica_id})
    for row in conflicts:
        logger.warning(
            f"Timestamp conflict in Fabrica {fabrica_id} at {seconds_to_timestamp(row['timestamp'])} "
            f"for Jingles: {', '.join(row['jingleIds'])}. Order assigned by element id."
        )
    return len(conflicts)


def update_appearance_order(client, fabrica_id: str) -> int:
    """
    Renumber APPEARS_IN.order 1..n by ascending timestamp for one Fabrica.

    Returns:
        Number of relationships renumbered
    """
    rows = client.execute_query(REORDER_QUERY, {"fabricaId": fabrica_id}, write=True)
    updated = rows[0]["updated"] if rows else 0
    logger.debug(f"Renumbered {updated} APPEARS_IN relationships for Fabrica {fabrica_id}")
    return updated


def reorder_all_appearances(client) -> ReorderSummary:
    """
    Renumber the APPEARS_IN order of every Fabrica that has appearances.

    A Fabrica that fails is recorded and the rest are still processed.
    """
    fabrica_ids = [row["id"] for row in client.execute_query(FABRICAS_WITH_APPEARANCES_QUERY)]
    summary = ReorderSummary(fabricas=len(fabrica_ids))

    if not fabrica_ids:
        logger.info("No Fabricas with APPEARS_IN relationships found")
        return summary

    logger.info(f"Found {len(fabrica_ids)} Fabricas with APPEARS_IN relationships")

    for position, fabrica_id in enumerate(fabrica_ids, 1):
        logger.info(f"[{position}/{len(fabrica_ids)}] Processing Fabrica: {fabrica_id}")
        try:
            summary.conflicts += warn_timestamp_conflicts(client, fabrica_id)
            summary.relationships += update_appearance_order(client, fabrica_id)
            summary.succeeded += 1
        except Exception as e:
            summary.failed.append(fabrica_id)
            logger.error(f"Failed to reorder Fabrica {fabrica_id}: {e}")

    logger.info(
        f"Reordered {summary.succeeded}/{summary.fabricas} Fabricas "
        f"({summary.relationships} relationships, {len(summary.failed)} failed)"
    )
    return summary
