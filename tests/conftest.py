# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for jingle catalogue tooling tests."""

import os
import pytest
from pathlib import Path
from typing import Callable

from loguru import logger

# Set test environment variables before importing the package
os.environ.setdefault("NEO4J_PASSWORD", "test-password")
os.environ.setdefault("NEO4J_URI", "bolt://localhost:7687")


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop sinks added during a test; CliRunner closes the streams they point at."""
    yield
    logger.remove()


@pytest.fixture
def mock_client(mocker):
    """Graph client double; every query returns no rows unless configured."""
    client = mocker.MagicMock()
    client.execute_query.return_value = []
    return client


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write CSV text to a temporary file and return its path."""

    def _write(content: str, name: str = "export.csv") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fabrica_csv_text() -> str:
    """Fabrica export with typed headers, mixed date formats and one bad row."""
    return (
        "id:ID,title,date,youtubeUrl,visualizations:int,likes:int,description,contents,status,createdAt,updatedAt\n"
        "0hmxZPp0xq0,Fabrica 1,25/12/2023,,1500,120,Primera,00:00 Intro,,2023-12-26,\n"
        "DBbyI99TtIM,Fabrica 2,2024-01-15T20:00:00.000Z,https://youtu.be/DBbyI99TtIM,,,,,PUBLISHED,,\n"
        ",Sin id,01/02/2024,,,,,,,,\n"
    )


@pytest.fixture
def jingle_csv_text() -> str:
    """Jingle export: one new jingle with a Fabrica, one without title/comment."""
    return (
        "id:ID,title,comment,timestamp,fabricaId,songTitle,artistName,isJinglazo:boolean,isLive:boolean,fabricaDate,createdAt\n"
        "j1a2b3c4d,Jingle uno,,01:02:31,0hmxZPp0xq0,Cancion,Artista,TRUE,no,25/12/2023,\n"
        "j5e6f7g8h,,,03:32,0hmxZPp0xq0,,,,,,\n"
    )
