"""Tests for hauswart.core.modifier — Modifier.json loading and reload."""

import json
import os

import pytest
from pydantic import ValidationError

from conftest import make_ics
from hauswart.core.modifier import (
    ModifierConfig,
    ModifierSource,
    load_modifier,
    modifier_from_dict,
)
from hauswart.data.task_store import TaskStore


def _write(path, data):
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")


def _bump_mtime(path):
    stat = os.stat(path)
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 2_000_000_000))


class TestModifierFromDict:
    def test_defaults_for_empty_document(self):
        config = modifier_from_dict({})
        assert config == ModifierConfig()
        assert config.description_delimiter == "\n"
        assert config.hint_separator == "##"
        assert (config.open_locked, config.done_locked) == (".*", ".✓")
        assert (config.open_unlocked, config.done_unlocked) == ("*", "✓")
        assert config.summary_delimiter == "//"
        assert config.summary_fields == ()

    def test_full_document(self):
        config = modifier_from_dict({
            "Modifier": {
                "Description": {
                    "Trennzeichen": "|",
                    "HinweisTrennzeichen": "::",
                    "UnterAufgabenStatus": {
                        "NichtBegonnen": {"Freigegeben": "[ ]", "Gesperrt": "-[ ]"},
                        "Erledigt": {"Freigegeben": "[x]", "Gesperrt": "-[x]"},
                    },
                },
                "Summary": {"Trennzeichen": ";;", "Inhalt": ["Titel", "Bereich"]},
            }
        })
        assert config.description_delimiter == "|"
        assert config.hint_separator == "::"
        assert config.open_unlocked == "[ ]"
        assert config.open_locked == "-[ ]"
        assert config.done_unlocked == "[x]"
        assert config.done_locked == "-[x]"
        assert config.summary_delimiter == ";;"
        assert config.summary_fields == ("Titel", "Bereich")

    def test_partial_status_keeps_other_defaults(self):
        config = modifier_from_dict({
            "Modifier": {"Description": {"UnterAufgabenStatus": {"Erledigt": {"Freigegeben": "x"}}}}
        })
        assert config.done_unlocked == "x"
        assert config.done_locked == ".✓"
        assert config.open_unlocked == "*"

    def test_null_falls_back_empty_string_kept(self):
        config = modifier_from_dict({
            "Modifier": {"Description": {"Trennzeichen": None, "HinweisTrennzeichen": ""}}
        })
        assert config.description_delimiter == "\n"
        assert config.hint_separator == ""

    def test_empty_summary_delimiter_falls_back(self, tasks_dir, caplog):
        config = modifier_from_dict({"Modifier": {"Summary": {"Trennzeichen": ""}}})
        assert config.summary_delimiter == "//"
        assert "Empty summary delimiter" in caplog.text

        task = TaskStore(tasks_dir, ModifierSource.from_config(config)).parse_task(
            make_ics("UID:x", "SUMMARY:Treppe // Keller 1")
        )
        assert task.summary.parts == ["Treppe", "Keller 1"]

    def test_wrong_types_rejected(self):
        with pytest.raises(ValidationError):
            modifier_from_dict({"Modifier": {"Summary": {"Inhalt": "Titel"}}})

    def test_config_is_frozen(self):
        config = ModifierConfig()
        with pytest.raises(ValidationError):
            config.hint_separator = "!!"


class TestModifierSource:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "Modifier.json"
        _write(path, {"Modifier": {"Summary": {"Inhalt": ["Titel"]}}})
        source = ModifierSource(path)
        assert source.config.summary_fields == ("Titel",)
        assert load_modifier(path) == source.config

    def test_reloads_when_file_changes(self, tmp_path):
        path = tmp_path / "Modifier.json"
        _write(path, {"Modifier": {"Summary": {"Trennzeichen": "//"}}})
        source = ModifierSource(path)
        assert source.refresh_if_stale() is False

        _write(path, {"Modifier": {"Summary": {"Trennzeichen": "||"}}})
        _bump_mtime(path)

        assert source.config.summary_delimiter == "||"
        assert source.refresh_if_stale() is False

    def test_missing_file_uses_defaults(self, tmp_path):
        source = ModifierSource(tmp_path / "missing.json")
        assert source.config == ModifierConfig()

    def test_from_config_never_reloads(self):
        config = ModifierConfig(summary_delimiter="|")
        source = ModifierSource.from_config(config)
        assert source.refresh_if_stale(force=True) is False
        assert source.config is config
