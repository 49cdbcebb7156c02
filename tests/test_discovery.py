from __future__ import annotations

import json
from pathlib import Path

import pytest

from steelclock.engine.discovery import (
    CORE_PROPS_SUBPATH,
    DiscoveryError,
    candidate_paths,
    discover_address,
    parse_address,
)


def _write_props(path: Path, contents: str) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    return str(path)


def test_discover_address_from_override(tmp_path) -> None:
    path = _write_props(tmp_path / "coreProps.json", json.dumps({"address": "127.0.0.1:54321"}))

    assert discover_address(path) == "127.0.0.1:54321"


def test_discover_address_from_programdata(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("PROGRAMDATA", str(tmp_path))
    _write_props(tmp_path / CORE_PROPS_SUBPATH, json.dumps({"address": "localhost:3650"}))

    assert candidate_paths()[0] == tmp_path / CORE_PROPS_SUBPATH
    assert discover_address() == "localhost:3650"


def test_missing_file(tmp_path) -> None:
    with pytest.raises(DiscoveryError):
        discover_address(str(tmp_path / "missing.json"))


@pytest.mark.parametrize(
    "contents",
    [
        "not json",
        "[]",
        json.dumps({}),
        json.dumps({"address": ""}),
        json.dumps({"address": "127.0.0.1"}),
        json.dumps({"address": "127.0.0.1:port"}),
        json.dumps({"address": "::1:80"}),
    ],
)
def test_malformed_descriptor(tmp_path, contents: str) -> None:
    path = _write_props(tmp_path / "coreProps.json", contents)

    with pytest.raises(DiscoveryError):
        discover_address(path)


def test_parse_address_accepts_host_port() -> None:
    assert parse_address("127.0.0.1:1") == "127.0.0.1:1"
