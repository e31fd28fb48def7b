# SPDX-License-Identifier: MIT
"""Tests for entity ID generation."""

import pytest

from jingledb.ids import (
    ENTITY_PREFIXES,
    EntityKind,
    IdCollisionError,
    generate_id,
    generate_ids,
    generate_unique_id,
    is_valid_id,
)


class TestEntityKind:
    """Prefix table and name lookup."""

    def test_prefix_table(self):
        assert {kind.value: prefix for kind, prefix in ENTITY_PREFIXES.items()} == {
            "Jingle": "j",
            "Cancion": "c",
            "Artista": "a",
            "Tematica": "t",
            "Usuario": "u",
        }

    def test_every_kind_has_a_prefix(self):
        assert set(ENTITY_PREFIXES) == set(EntityKind)

    @pytest.mark.parametrize("name, kind", [
        ("jingle", EntityKind.JINGLE),
        ("Jingles", EntityKind.JINGLE),
        ("canciones", EntityKind.CANCION),
        ("ARTISTA", EntityKind.ARTISTA),
        ("tematicas", EntityKind.TEMATICA),
        (" usuario ", EntityKind.USUARIO),
    ])
    def test_from_name(self, name, kind):
        assert EntityKind.from_name(name) is kind

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown entity type"):
            EntityKind.from_name("fabrica")


class TestGenerateId:
    """Random ID format."""

    @pytest.mark.parametrize("kind", list(EntityKind))
    def test_format(self, kind):
        new_id = generate_id(kind)
        assert len(new_id) == 9
        assert new_id.startswith(kind.prefix)
        assert is_valid_id(kind, new_id)

    def test_ids_differ(self):
        assert len(set(generate_ids(EntityKind.JINGLE, 100))) == 100

    @pytest.mark.parametrize("count", [0, 101, -1])
    def test_count_bounds(self, count):
        with pytest.raises(ValueError, match="between 1 and 100"):
            generate_ids(EntityKind.JINGLE, count)

    @pytest.mark.parametrize("value", ["", "c1a2b3c4d", "j1a2b3c4", "j1A2B3C4D", "j1a2b3c4d5"])
    def test_invalid_ids(self, value):
        assert not is_valid_id(EntityKind.JINGLE, value)


class TestGenerateUniqueId:
    """Collision checking against the graph."""

    def test_first_candidate_free(self, mock_client):
        new_id = generate_unique_id(mock_client, EntityKind.CANCION)
        assert is_valid_id(EntityKind.CANCION, new_id)
        query, params = mock_client.execute_query.call_args.args
        assert "MATCH (n:Cancion" in query
        assert params == {"id": new_id}

    def test_retries_after_collision(self, mock_client):
        mock_client.execute_query.side_effect = [[{"id": "taken"}], []]
        generate_unique_id(mock_client, EntityKind.JINGLE)
        assert mock_client.execute_query.call_count == 2

    def test_gives_up(self, mock_client):
        mock_client.execute_query.return_value = [{"id": "taken"}]
        with pytest.raises(IdCollisionError):
            generate_unique_id(mock_client, EntityKind.JINGLE, max_attempts=3)
        assert mock_client.execute_query.call_count == 3
