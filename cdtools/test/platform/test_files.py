from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from cdtools.platform.files import atomic_write_text, dump_json, write_json


def test_atomic_write_text_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / ".cdtools" / "config.json"
    atomic_write_text(path, '{"ok":true}\n')

    assert path.read_text(encoding="utf-8") == '{"ok":true}\n'


def test_atomic_write_text_replaces_existing_content(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("old", encoding="utf-8")

    atomic_write_text(path, "new", encoding="utf-8")

    assert path.read_text(encoding="utf-8") == "new"


def test_atomic_write_text_cleans_temp_file_on_replace_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    path = tmp_path / "state.json"

    def fail_replace(_src: Path, _dst: Path) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError, match="replace failed"):
        atomic_write_text(path, "payload", encoding="utf-8")

    assert not path.exists()
    assert list(tmp_path.iterdir()) == []


def test_dump_json_uses_tabs_and_trailing_newline() -> None:
    assert dump_json({"tag": "alpha", "n": [1]}) == '{\n\t"tag": "alpha",\n\t"n": [\n\t\t1\n\t]\n}\n'


def test_dump_json_keeps_non_ascii() -> None:
    assert '"café"' in dump_json({"name": "café"})


def test_write_json_round_trips(tmp_path: Path) -> None:
    path = tmp_path / "a.json"
    write_json(path, {"parentBranch": "main"})
    assert json.loads(path.read_text(encoding="utf-8")) == {"parentBranch": "main"}
