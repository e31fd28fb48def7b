"""Data tooling for the jingle catalogue graph: normalization, IDs, schema and CSV import."""
