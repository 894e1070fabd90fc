"""Tests for atomic file writers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from orgcheck.io import write_json_atomic, write_text_atomic


def test_write_json_atomic_cleans_temp_file_on_error(tmp_path: Path) -> None:
    out_path = tmp_path / "report.json"
    temp_prefix = ".tmp-"
    temp_suffix = ".json"

    with pytest.raises(TypeError):
        write_json_atomic(
            path=out_path,
            payload={"bad": object()},
            temp_prefix=temp_prefix,
            temp_suffix=temp_suffix,
        )

    leftovers = [
        item for item in tmp_path.iterdir() if item.name.startswith(temp_prefix) and item.name.endswith(temp_suffix)
    ]
    assert not leftovers
    assert not out_path.exists()


def test_write_json_atomic_replaces_existing(tmp_path: Path) -> None:
    out_path = tmp_path / "nested" / "report.json"
    write_json_atomic(path=out_path, payload={"v": 1}, temp_prefix=".tmp-", temp_suffix=".json")
    write_json_atomic(path=out_path, payload={"v": 2}, temp_prefix=".tmp-", temp_suffix=".json")

    assert json.loads(out_path.read_text(encoding="utf-8")) == {"v": 2}


def test_write_text_atomic_keeps_content_verbatim(tmp_path: Path) -> None:
    out_path = tmp_path / "results.csv"

    write_text_atomic(path=out_path, content="a,b\r\n1,2\r\n", temp_prefix=".csv_tmp_", temp_suffix=".csv")

    assert out_path.read_bytes() == b"a,b\r\n1,2\r\n"
