"""Shared test fixtures and configuration.

Sets environment variables before any hauswart import and provides temp
task directories, a Modifier.json and a StammDaten.json.
"""

import os

# Patch env vars BEFORE any hauswart imports
os.environ.setdefault("TIMEZONE", "Europe/Berlin")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import json

import pytest

from hauswart.core.modifier import ModifierConfig, ModifierSource


SAMPLE_REFERENCE = {
    "Stammdaten": {
        "Adresse": [
            {"ID": 1, "Straße": "Lindenweg", "Hausnummer": "4", "PLZ": "10115", "Ort": "Berlin"},
            {"ID": 2, "Straße": "Am Markt", "Hausnummer": "12a", "PLZ": "10117", "Ort": "Berlin"},
        ],
        "Person": [
            {"ID": 1, "Name": "Anna Weber", "Telefon": "030 1234567"},
            {"ID": 2, "Name": "Jonas Krüger", "Telefon": "030 7654321"},
        ],
        "Typ": [
            {"ID": 1, "Name": "Haus"},
            {"ID": 2, "Name": "Wohnung"},
            {"ID": 3, "Name": " Keller "},
        ],
        "Haus": [
            {"Typ.ID": 1, "ID": 1, "Adresse.ID": 1},
            {"Typ.ID": 1, "ID": 2, "Adresse.ID": 2},
            {"Typ.ID": 1, "ID": 3, "Adresse.ID": 99},
        ],
        "Bereich": [
            {"Typ.ID": 2, "ID": 1, "Haus.ID": 1, "Eingang": "A", "Lage": "EG links", "Person.ID": [1]},
            {"Typ.ID": 2, "ID": 2, "Haus.ID": 1, "Eingang": "A", "Lage": "1. OG", "Person.ID": [2, 42]},
            {"Typ.ID": 3, "ID": 1, "Haus.ID": 1, "Eingang": "Hof", "Lage": "UG", "Person.ID": [1, 2]},
            {"Typ.ID": 3, "ID": 3, "Haus.ID": 2, "Eingang": "B", "Lage": "UG", "Person.ID": []},
            {"Typ.ID": 2, "ID": 12, "Haus.ID": 2, "Eingang": "B", "Lage": "3. OG", "Person.ID": [2]},
        ],
    }
}


def make_ics(*todo_lines: str, newline: str = "\n") -> str:
    """Wrap VTODO property lines in a minimal VCALENDAR."""
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Hauswart Tests//DE",
        "BEGIN:VTODO",
        *todo_lines,
        "END:VTODO",
        "END:VCALENDAR",
    ]
    return newline.join(lines) + newline


@pytest.fixture
def modifier_config():
    """Default symbols with the three summary fields the board uses."""
    return ModifierConfig(summary_fields=("Titel", "Bereich", "Verantwortlich"))


@pytest.fixture
def tasks_dir(tmp_path):
    path = tmp_path / "tasks"
    path.mkdir()
    return path


@pytest.fixture
def store(tasks_dir, modifier_config):
    """Return a TaskStore over a temp tasks directory."""
    from hauswart.data.task_store import TaskStore
    return TaskStore(
        tasks_dir=tasks_dir,
        modifier=ModifierSource.from_config(modifier_config),
        extension=".ics",
    )


@pytest.fixture
def write_task(tasks_dir):
    """Write a task file into the temp tasks directory and return its path."""
    def _write(name, content):
        path = tasks_dir / name
        path.write_bytes(content.encode("utf-8"))
        return path
    return _write


@pytest.fixture
def reference_path(tmp_path):
    """Return a StammDaten.json path filled with SAMPLE_REFERENCE."""
    path = tmp_path / "StammDaten.json"
    path.write_text(json.dumps(SAMPLE_REFERENCE, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def reference_repo(reference_path):
    from hauswart.data.reference_repository import ReferenceRepository
    return ReferenceRepository(reference_path)
