# tests/test_importer.py
import json

import pytest
import yaml

from leet_tracker.importer import export_problems, import_problems, read_problem_file
from leet_tracker.models import Status
from tests.conftest import make_problem


def test_read_json_list(tmp_path):
    f = tmp_path / "problems.json"
    f.write_text(json.dumps([{"problem_number": 1, "title": "Two Sum"}]))
    assert read_problem_file(str(f)) == [{"problem_number": 1, "title": "Two Sum"}]


def test_read_json_export_shape(tmp_path):
    f = tmp_path / "export.json"
    f.write_text(json.dumps({"problems": [{"title": "a"}, "junk"], "stats": {}}))
    assert read_problem_file(str(f)) == [{"title": "a"}]


def test_read_yaml_file(tmp_path):
    f = tmp_path / "problems.yaml"
    f.write_text("problems:\n  - problem_number: 20\n    title: Valid Parentheses\n")
    assert read_problem_file(str(f))[0]["title"] == "Valid Parentheses"


def test_read_csv_file(tmp_path):
    f = tmp_path / "problems.csv"
    f.write_text("problem_number,title,difficulty,pattern\n1,Two Sum,Easy,Hash Table\n")
    rows = read_problem_file(str(f))
    assert rows == [{"problem_number": "1", "title": "Two Sum", "difficulty": "Easy", "pattern": "Hash Table"}]


def test_read_unsupported_file(tmp_path):
    f = tmp_path / "notes.txt"
    f.write_text("hello")
    with pytest.raises(ValueError):
        read_problem_file(str(f))


def test_export_json(tmp_path):
    problems = [make_problem(1), make_problem(2, status=Status.MASTERED)]
    out = tmp_path / "out" / "export.json"
    result = export_problems(problems, str(out))
    assert result == {"filename": "export.json", "count": 2}
    data = json.loads(out.read_text())
    assert [p["id"] for p in data["problems"]] == [1, 2]
    assert data["stats"]["mastered_count"] == 1


def test_export_yaml(tmp_path):
    out = tmp_path / "export.yml"
    export_problems([make_problem(1)], str(out))
    data = yaml.safe_load(out.read_text())
    assert data["problems"][0]["title"] == "Problem 1"


def test_import_skips_invalid_records(tmp_path, api, server):
    f = tmp_path / "problems.json"
    f.write_text(json.dumps([
        {"problem_number": 1, "title": "Two Sum", "difficulty": "Easy", "pattern": "Hash Table"},
        {"problem_number": 0, "title": "Bad", "difficulty": "Easy", "pattern": "Hash"},
        {"problem_number": 2, "title": "Add Two Numbers", "difficulty": 2, "pattern": "Linked List"},
    ]))
    result = import_problems(api, str(f))
    assert result["imported"] == 2
    assert result["skipped"] == 1
    assert result["errors"][0]["record"] == 2
    assert "problem_number" in result["errors"][0]["errors"]
    assert sorted(row["title"] for row in server.rows.values()) == ["Add Two Numbers", "Two Sum"]


def test_import_records_server_failures(tmp_path, api, server):
    server.fail.add(("POST", "/problems"))
    f = tmp_path / "problems.json"
    f.write_text(json.dumps([{"problem_number": 1, "title": "Two Sum", "difficulty": "Easy", "pattern": "Hash"}]))
    result = import_problems(api, str(f))
    assert result["imported"] == 0
    assert result["errors"][0]["errors"]["submit"] == "boom"


def test_export_then_import_roundtrip(tmp_path, api, server):
    out = tmp_path / "export.json"
    export_problems([make_problem(5, title="Longest Palindrome", pattern="String")], str(out))
    result = import_problems(api, str(out))
    assert result["imported"] == 1
    assert server.rows[1]["problem_number"] == 5
