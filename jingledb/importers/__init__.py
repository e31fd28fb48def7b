"""
CSV importers for graph node exports.

Each importer reads one entity's CSV export, normalizes its cells and upserts
the rows into the graph in batches.
"""

from jingledb.importers.base import (
    BaseImporter,
    DuplicateRowError,
    ImportResult,
    ImportRow,
    RowError,
)
from jingledb.importers.fabricas import FabricaImporter
from jingledb.importers.jingles import JingleImporter

# Registry of available importers
IMPORTERS = {
    "fabricas": FabricaImporter,
    "jingles": JingleImporter,
}

__all__ = [
    "BaseImporter",
    "DuplicateRowError",
    "ImportResult",
    "ImportRow",
    "RowError",
    "FabricaImporter",
    "JingleImporter",
    "IMPORTERS",
]
