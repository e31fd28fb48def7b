"""
Entity ID generation.

IDs have the form ``{prefix}{8 chars}``: a single-character prefix naming the
entity kind followed by eight lowercase base36 characters (0-9, a-z).
Fabricas are the exception and keep their 11-character YouTube video ID.
"""

import re
import secrets
import string
from enum import Enum

from loguru import logger

BASE36_ALPHABET = string.digits + string.ascii_lowercase
ID_BODY_LENGTH = 8

MIN_BATCH = 1
MAX_BATCH = 100


class EntityKind(str, Enum):
    """Entity kinds that receive generated IDs, mapped to their graph label."""

    JINGLE = "Jingle"
    CANCION = "Cancion"
    ARTISTA = "Artista"
    TEMATICA = "Tematica"
    USUARIO = "Usuario"

    @property
    def label(self) -> str:
        return self.value

    @property
    def prefix(self) -> str:
        return ENTITY_PREFIXES[self]

    @classmethod
    def from_name(cls, name: str) -> "EntityKind":
        """
        Look up a kind by name, case-insensitive, singular or plural.

        Raises:
            ValueError: If the name is not a known entity kind
        """
        key = name.strip().lower()
        for kind in cls:
            singular = kind.value.lower()
            if key in (singular, _plural(singular)):
                return kind
        raise ValueError(f"Unknown entity type: {name}")

    @classmethod
    def names(cls) -> list[str]:
        return [kind.value.lower() for kind in cls]


def _plural(singular: str) -> str:
    # cancion -> canciones, jingle -> jingles
    return singular + ("es" if singular.endswith("n") else "s")


ENTITY_PREFIXES = {
    EntityKind.JINGLE: "j",
    EntityKind.CANCION: "c",
    EntityKind.ARTISTA: "a",
    EntityKind.TEMATICA: "t",
    EntityKind.USUARIO: "u",
}


class IdCollisionError(RuntimeError):
    """Raised when no unused ID was found within max_attempts tries."""
    pass


def generate_id(kind: EntityKind) -> str:
    """Generate a random ID for an entity kind."""
    body = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(ID_BODY_LENGTH))
    return f"{kind.prefix}{body}"


def generate_ids(kind: EntityKind, count: int = 1) -> list[str]:
    """
    Generate several IDs at once.

    Raises:
        ValueError: If count is outside 1..100
    """
    if not MIN_BATCH <= count <= MAX_BATCH:
        raise ValueError(f"Count must be between {MIN_BATCH} and {MAX_BATCH}")
    return [generate_id(kind) for _ in range(count)]


def is_valid_id(kind: EntityKind, value: str) -> bool:
    pattern = rf"^{re.escape(kind.prefix)}[0-9a-z]{{{ID_BODY_LENGTH}}}$"
    return bool(value) and re.match(pattern, value) is not None


def generate_unique_id(client, kind: EntityKind, max_attempts: int = 10) -> str:
    """
    Generate an ID not yet used by any node of the kind's label.

    Args:
        client: GraphClient used for the existence check
        kind: Entity kind
        max_attempts: Number of candidates to try

    Raises:
        IdCollisionError: If every candidate was already taken
    """
    query = f"MATCH (n:{kind.label} {{id: $id}}) RETURN n.id AS id LIMIT 1"

    for attempt in range(1, max_attempts + 1):
        candidate = generate_id(kind)
        if not client.execute_query(query, {"id": candidate}):
            return candidate
        logger.warning(f"ID collision detected for {candidate}, retrying ({attempt}/{max_attempts})")

    raise IdCollisionError(
        f"Failed to generate unique ID for {kind.label} after {max_attempts} attempts"
    )
