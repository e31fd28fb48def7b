"""
Graph schema for the jingle catalogue.

Nodes
-----
Usuario, Jingle, Artista, Cancion, Fabrica, Tematica. Every node has a unique
``id``. Jingle, Artista, Cancion, Tematica and Usuario IDs are generated
(see ``jingledb.ids``); Fabrica IDs are the episode's YouTube video ID.

Relationships
-------------
    (Jingle)-[:APPEARS_IN {timestamp, order}]->(Fabrica)
    (Artista)-[:JINGLERO_DE]->(Jingle)
    (Artista)-[:AUTOR_DE]->(Cancion)
    (Jingle)-[:VERSIONA]->(Cancion)
    (Jingle)-[:TAGGED_WITH {isPrimary}]->(Tematica)
    (Usuario)-[:SOY_YO]->(Artista)
    (Usuario)-[:REACCIONA_A {type}]->(Jingle)
    (Jingle)-[:REPEATS]->(Jingle)

``APPEARS_IN.order`` is system-managed: relationships into one Fabrica are
sorted by ``timestamp`` (integer seconds) and numbered 1..n.

Redundant properties (relationships are the source of truth):
    Jingle.fabricaId, Jingle.fabricaDate  <- APPEARS_IN
    Jingle.cancionId                      <- VERSIONA
    Cancion.autorIds                      <- AUTOR_DE

All date/datetime properties hold canonical UTC timestamps
(``YYYY-MM-DDTHH:mm:ss.sssZ``) converted with Cypher ``datetime()``.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from loguru import logger


class NodeLabel(str, Enum):
    USUARIO = "Usuario"
    JINGLE = "Jingle"
    ARTISTA = "Artista"
    CANCION = "Cancion"
    FABRICA = "Fabrica"
    TEMATICA = "Tematica"


class RelationshipType(str, Enum):
    APPEARS_IN = "APPEARS_IN"
    JINGLERO_DE = "JINGLERO_DE"
    AUTOR_DE = "AUTOR_DE"
    VERSIONA = "VERSIONA"
    TAGGED_WITH = "TAGGED_WITH"
    SOY_YO = "SOY_YO"
    REACCIONA_A = "REACCIONA_A"
    REPEATS = "REPEATS"


class EntityStatus(str, Enum):
    DRAFT = "DRAFT"
    REVIEW = "REVIEW"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"
    DELETED = "DELETED"


class RelationshipStatus(str, Enum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"


class TematicaCategory(str, Enum):
    ACTUALIDAD = "ACTUALIDAD"
    POLITICA = "POLITICA"
    CULTURA = "CULTURA"
    GENTE = "GENTE"
    GELATINA = "GELATINA"


# (start label, end label) for each relationship type
RELATIONSHIP_ENDPOINTS = {
    RelationshipType.APPEARS_IN: (NodeLabel.JINGLE, NodeLabel.FABRICA),
    RelationshipType.JINGLERO_DE: (NodeLabel.ARTISTA, NodeLabel.JINGLE),
    RelationshipType.AUTOR_DE: (NodeLabel.ARTISTA, NodeLabel.CANCION),
    RelationshipType.VERSIONA: (NodeLabel.JINGLE, NodeLabel.CANCION),
    RelationshipType.TAGGED_WITH: (NodeLabel.JINGLE, NodeLabel.TEMATICA),
    RelationshipType.SOY_YO: (NodeLabel.USUARIO, NodeLabel.ARTISTA),
    RelationshipType.REACCIONA_A: (NodeLabel.USUARIO, NodeLabel.JINGLE),
    RelationshipType.REPEATS: (NodeLabel.JINGLE, NodeLabel.JINGLE),
}


CONSTRAINTS = [
    # Unique IDs
    "CREATE CONSTRAINT id_Artista_uniq IF NOT EXISTS FOR (n:Artista) REQUIRE (n.id) IS UNIQUE",
    "CREATE CONSTRAINT id_Cancion_uniq IF NOT EXISTS FOR (n:Cancion) REQUIRE (n.id) IS UNIQUE",
    "CREATE CONSTRAINT id_Fabrica_uniq IF NOT EXISTS FOR (n:Fabrica) REQUIRE (n.id) IS UNIQUE",
    "CREATE CONSTRAINT id_Jingle_uniq IF NOT EXISTS FOR (n:Jingle) REQUIRE (n.id) IS UNIQUE",
    "CREATE CONSTRAINT id_Tematica_uniq IF NOT EXISTS FOR (n:Tematica) REQUIRE (n.id) IS UNIQUE",
    "CREATE CONSTRAINT id_Usuario_uniq IF NOT EXISTS FOR (n:Usuario) REQUIRE (n.id) IS UNIQUE",

    "CREATE CONSTRAINT user_email IF NOT EXISTS FOR (u:Usuario) REQUIRE (u.email) IS UNIQUE",
    "CREATE CONSTRAINT user_required IF NOT EXISTS FOR (u:Usuario) REQUIRE (u.displayName) IS NOT NULL",

    "CREATE CONSTRAINT clip_required IF NOT EXISTS FOR (c:Jingle) REQUIRE (c.timestamp) IS NOT NULL",

    "CREATE CONSTRAINT artist_name IF NOT EXISTS FOR (a:Artista) REQUIRE (a.name) IS NOT NULL",
    "CREATE CONSTRAINT artist_required IF NOT EXISTS FOR (a:Artista) REQUIRE (a.id) IS NOT NULL",

    "CREATE CONSTRAINT song_required IF NOT EXISTS FOR (s:Cancion) REQUIRE (s.title) IS NOT NULL",

    "CREATE CONSTRAINT term_name IF NOT EXISTS FOR (t:Tematica) REQUIRE (t.name) IS NOT NULL",
    "CREATE CONSTRAINT term_required IF NOT EXISTS FOR (t:Tematica) REQUIRE (t.id) IS NOT NULL",

    "CREATE CONSTRAINT stream_required IF NOT EXISTS FOR (f:Fabrica) REQUIRE (f.date) IS NOT NULL",
]

INDEXES = [
    # Full-text search
    "CREATE FULLTEXT INDEX jingle_search IF NOT EXISTS FOR (j:Jingle) ON EACH [j.title, j.songTitle, j.artistName, j.comment]",
    "CREATE FULLTEXT INDEX tematica_search IF NOT EXISTS FOR (t:Tematica) ON EACH [t.name, t.description]",

    # Frequent lookups
    "CREATE INDEX jingle_timestamp IF NOT EXISTS FOR (j:Jingle) ON j.timestamp",
    "CREATE INDEX fabrica_date IF NOT EXISTS FOR (f:Fabrica) ON f.date",
    "CREATE INDEX cancion_year IF NOT EXISTS FOR (c:Cancion) ON c.year",
    "CREATE INDEX term_category IF NOT EXISTS FOR (t:Tematica) ON t.category",
]


LABELS_QUERY = "CALL db.labels() YIELD label RETURN label"
RELATIONSHIP_TYPES_QUERY = "CALL db.relationshipTypes() YIELD relationshipType RETURN relationshipType"

# Labels, property names, relationship types and constraint names are
# interpolated into Cypher, so only plain identifiers are accepted
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SchemaError(ValueError):
    """Raised when a schema change is invalid or refers to a missing label."""
    pass


class ConstraintKind(str, Enum):
    UNIQUE = "unique"
    NOT_NULL = "not_null"
    EXISTS = "exists"  # older name for NOT_NULL


CONSTRAINT_REQUIREMENTS = {
    ConstraintKind.UNIQUE: "IS UNIQUE",
    ConstraintKind.NOT_NULL: "IS NOT NULL",
    ConstraintKind.EXISTS: "IS NOT NULL",
}


@dataclass
class SchemaSetupResult:
    """Result of applying the schema."""
    dropped: int = 0
    created: int = 0
    failed: int = 0
    warnings: list[str] = field(default_factory=list)


def statement_name(statement: str) -> str:
    """Extract the constraint/index name from a CREATE statement."""
    head = statement.split(" IF NOT EXISTS", 1)[0]
    return head.split()[-1]


def _apply(client, statement: str, result: SchemaSetupResult) -> None:
    name = statement_name(statement)
    try:
        client.execute_write(statement)
        result.created += 1
        logger.info(f"Created {name}")
    except Exception as e:
        result.failed += 1
        result.warnings.append(f"{name}: {e}")
        logger.warning(f"Warning creating {name}: {e}")


def setup_schema(client, drop_existing: bool = True) -> SchemaSetupResult:
    """
    Apply constraints and indexes to the database.

    A failing statement is logged and skipped; the remaining statements are
    still applied.

    Args:
        client: GraphClient
        drop_existing: Drop every existing constraint first

    Returns:
        SchemaSetupResult with counts
    """
    result = SchemaSetupResult()

    if drop_existing:
        logger.info("Dropping existing constraints...")
        for row in client.execute_query("SHOW CONSTRAINTS YIELD name RETURN name", write=True):
            client.execute_write(f"DROP CONSTRAINT {row['name']} IF EXISTS")
            result.dropped += 1
            logger.info(f"Dropped constraint: {row['name']}")

    logger.info("Creating constraints...")
    for statement in CONSTRAINTS:
        _apply(client, statement, result)

    logger.info("Creating indexes...")
    for statement in INDEXES:
        _apply(client, statement, result)

    logger.info(
        f"Schema setup complete: {result.created} created, "
        f"{result.failed} failed, {result.dropped} dropped"
    )
    return result


def get_schema_info(client) -> dict[str, Any]:
    """Describe the labels, relationship types, property keys, constraints and indexes in the database."""
    labels = client.execute_query(LABELS_QUERY)
    relationship_types = client.execute_query(RELATIONSHIP_TYPES_QUERY)
    property_keys = client.execute_query("CALL db.propertyKeys() YIELD propertyKey RETURN propertyKey")
    constraints = client.execute_query(
        "SHOW CONSTRAINTS YIELD name, type, entityType, labelsOrTypes, properties "
        "RETURN name, type, entityType, labelsOrTypes, properties"
    )
    indexes = client.execute_query(
        "SHOW INDEXES YIELD name, type, entityType, labelsOrTypes, properties "
        "RETURN name, type, entityType, labelsOrTypes, properties"
    )

    return {
        "labels": [row["label"] for row in labels],
        "relationship_types": [row["relationshipType"] for row in relationship_types],
        "property_keys": [row["propertyKey"] for row in property_keys],
        "constraints": constraints,
        "indexes": indexes,
    }


def _identifier(value: str, what: str) -> str:
    if not value or not IDENTIFIER_PATTERN.match(value):
        raise SchemaError(f"Invalid {what}: {value!r}")
    return value


def _constraint_kind(kind: ConstraintKind | str) -> ConstraintKind:
    try:
        return ConstraintKind(kind)
    except ValueError:
        raise SchemaError(f"Unsupported constraint type: {kind}") from None


def constraint_statement(
    label: str,
    prop: str,
    kind: ConstraintKind | str = ConstraintKind.UNIQUE,
    name: Optional[str] = None,
) -> tuple[str, str]:
    """
    Build a CREATE CONSTRAINT statement for one node property.

    Returns:
        (constraint name, statement). The name defaults to
        ``{label}_{prop}_{kind}`` in lower case.
    """
    kind = _constraint_kind(kind)
    label = _identifier(label, "label")
    prop = _identifier(prop, "property")
    name = _identifier(name or f"{label.lower()}_{prop}_{kind.value}", "constraint name")

    statement = (
        f"CREATE CONSTRAINT {name} IF NOT EXISTS "
        f"FOR (n:{label}) REQUIRE (n.{prop}) {CONSTRAINT_REQUIREMENTS[kind]}"
    )
    return name, statement


def create_constraint(
    client,
    label: str,
    prop: str,
    kind: ConstraintKind | str = ConstraintKind.UNIQUE,
    name: Optional[str] = None,
) -> str:
    """
    Create a single constraint outside the standard schema.

    Unlike ``setup_schema``, a database error is propagated.

    Returns:
        The constraint name

    Raises:
        SchemaError: On an unsupported kind or a non-identifier name
    """
    name, statement = constraint_statement(label, prop, kind, name)
    client.execute_write(statement)
    logger.info(f"Constraint {name} created for {label}.{prop}")
    return name


def drop_constraint(client, name: str, if_exists: bool = False) -> None:
    """Drop a constraint by name; without ``if_exists`` a missing one is a database error."""
    name = _identifier(name, "constraint name")
    client.execute_write(f"DROP CONSTRAINT {name}{' IF EXISTS' if if_exists else ''}")
    logger.info(f"Constraint {name} dropped")


def _existing_labels(client) -> set[str]:
    return {row["label"] for row in client.execute_query(LABELS_QUERY)}


def add_property_to_entity(client, label: str, prop: str, property_type: str = "string") -> Optional[str]:
    """
    Register a new property on an existing node label.

    Neo4j is schema-free, so this only validates the label and, for the
    ``unique`` property type, creates a uniqueness constraint.

    Returns:
        Name of the constraint created, or None

    Raises:
        SchemaError: If the label does not exist in the database
    """
    _identifier(prop, "property")
    if _identifier(label, "label") not in _existing_labels(client):
        raise SchemaError(f"Entity type {label} does not exist")

    logger.info(f"Property {prop} of type {property_type} added to entity {label}")
    if property_type == "unique":
        return create_constraint(client, label, prop, ConstraintKind.UNIQUE)
    return None


def create_relationship_type(client, rel_type: str, start_label: str, end_label: str) -> bool:
    """
    Register a relationship type between two existing labels.

    The type is established by creating and deleting one relationship between
    a pair of existing nodes.

    Returns:
        False if the type already existed, True otherwise

    Raises:
        SchemaError: If either label does not exist in the database
    """
    rel_type = _identifier(rel_type, "relationship type")
    labels = _existing_labels(client)
    for role, label in (("Start", start_label), ("End", end_label)):
        if _identifier(label, "label") not in labels:
            raise SchemaError(f"{role} label {label} does not exist")

    existing = {row["relationshipType"] for row in client.execute_query(RELATIONSHIP_TYPES_QUERY)}
    if rel_type in existing:
        logger.info(f"Relationship type {rel_type} already exists")
        return False

    client.execute_write(
        f"MATCH (start:{start_label}), (end:{end_label}) "
        f"WITH start, end LIMIT 1 "
        f"CREATE (start)-[r:{rel_type}]->(end) "
        f"DELETE r"
    )
    logger.info(f"Relationship type {rel_type} created between {start_label} and {end_label}")
    return True
