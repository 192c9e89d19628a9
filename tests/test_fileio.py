"""Tests for studylog/fileio.py — workspace JSON/YAML reads and atomic writes."""

import json
from unittest.mock import patch

import pytest

from studylog.fileio import read_json, read_yaml, write_json_atomic, write_yaml_atomic


def test_missing_and_blank_files_read_as_empty(tmp_path):
    assert read_json(tmp_path / "study_logs.json") == {}
    (tmp_path / "cache.json").write_text("  \n", encoding="utf-8")
    assert read_json(tmp_path / "cache.json") == {}
    assert read_yaml(tmp_path / "config.yaml") == {}


def test_non_object_documents_read_as_empty(tmp_path):
    (tmp_path / "study_logs.json").write_text("[1, 2]", encoding="utf-8")
    assert read_json(tmp_path / "study_logs.json") == {}
    (tmp_path / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")
    assert read_yaml(tmp_path / "config.yaml") == {}


def test_corrupt_json_raises(tmp_path):
    (tmp_path / "study_logs.json").write_text('{"study_logs": [', encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        read_json(tmp_path / "study_logs.json")


def test_write_json_creates_data_dir_and_leaves_no_temp_files(tmp_path):
    path = tmp_path / "data" / "study_logs.json"
    write_json_atomic(path, {"study_logs": [{"date": "2024-01-10", "hours": 2}]})
    write_json_atomic(path, {"study_logs": []})
    assert read_json(path) == {"study_logs": []}
    assert [p.name for p in path.parent.iterdir()] == ["study_logs.json"]


def test_failed_write_keeps_previous_collection(tmp_path):
    path = tmp_path / "study_logs.json"
    write_json_atomic(path, {"study_logs": [{"date": "2024-01-10", "hours": 2}]})
    with patch("studylog.fileio.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            write_json_atomic(path, {"study_logs": []})
    assert read_json(path) == {"study_logs": [{"date": "2024-01-10", "hours": 2}]}
    assert [p.name for p in tmp_path.iterdir()] == ["study_logs.json"]


def test_write_yaml_keeps_key_order(tmp_path):
    path = tmp_path / "config.yaml"
    write_yaml_atomic(path, {"timezone": "UTC", "backend": "file", "table": "study_logs"})
    assert path.read_text(encoding="utf-8").splitlines()[0] == "timezone: UTC"
    assert read_yaml(path) == {"timezone": "UTC", "backend": "file", "table": "study_logs"}
