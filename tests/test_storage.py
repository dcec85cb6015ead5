from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagesmith.core.models import BlockInstance, PageState
from pagesmith.core.storage import (
    SNAPSHOT_VERSION,
    JsonFileStore,
    MemoryStore,
    decode_snapshot,
    encode_snapshot,
)
from pagesmith.errors import PersistenceError


def _state() -> PageState:
    return PageState(
        blocks=[
            BlockInstance("block-a", "hero-simple", {"h1": "Café opening"}),
            BlockInstance("block-b", "footer-simple"),
        ],
        title="Launch",
    )


def test_snapshot_layout() -> None:
    data = json.loads(encode_snapshot(_state(), saved_at=1700000000000))
    assert data["version"] == SNAPSHOT_VERSION
    assert data["saved_at"] == 1700000000000
    assert data["title"] == "Launch"
    assert [b["instance_id"] for b in data["blocks"]] == ["block-a", "block-b"]
    assert data["blocks"][0]["content"] == {"h1": "Café opening"}


def test_decode_snapshot_restores_state() -> None:
    restored = decode_snapshot(encode_snapshot(_state()).encode("utf-8"))
    assert restored == _state()


@pytest.mark.parametrize(
    "blob",
    [
        None,
        "",
        "{not json",
        "[]",
        '{"version": 2, "blocks": []}',
        '{"version": 1, "blocks": {}}',
        '{"version": 1, "blocks": [{"template_id": "hero-simple"}]}',
        '{"version": 1, "blocks": [{"instance_id": "a", "template_id": "x", "content": {"h1": 3}}]}',
        b"\xff\xfe",
        "[" * 200000,
    ],
)
def test_unusable_snapshots_decode_to_none(blob: object) -> None:
    assert decode_snapshot(blob) is None


def test_duplicate_instance_ids_reject_the_snapshot() -> None:
    blob = json.dumps({
        "version": 1,
        "blocks": [
            {"instance_id": "a", "template_id": "hero-simple", "content": {}},
            {"instance_id": "a", "template_id": "footer-simple", "content": {}},
        ],
    })
    assert decode_snapshot(blob) is None


def test_memory_store_roundtrip() -> None:
    store = MemoryStore()
    store.save("k", "blob")
    assert store.load("k") == "blob"
    store.clear("k")
    store.clear("k")
    assert store.load("k") is None


def test_json_file_store_save_load_clear(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "state")
    blob = encode_snapshot(_state())
    store.save("pagesmith_canvas_state", blob)

    path = store.path_for("pagesmith_canvas_state")
    assert path == tmp_path / "state" / "pagesmith_canvas_state.json"
    assert path.read_text(encoding="utf-8") == blob
    assert store.load("pagesmith_canvas_state") == blob
    assert [p.name for p in path.parent.iterdir()] == ["pagesmith_canvas_state.json"]

    store.clear("pagesmith_canvas_state")
    assert not path.exists()
    assert store.load("pagesmith_canvas_state") is None
    store.clear("pagesmith_canvas_state")


def test_json_file_store_sanitises_keys(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)
    assert store.path_for("../escape/me").parent == tmp_path
    assert store.path_for("a b").name == "a_b.json"


def test_json_file_store_reports_write_failures(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    store = JsonFileStore(blocker)
    with pytest.raises(PersistenceError):
        store.save("key", "{}")


def test_json_file_store_ignores_undecodable_files(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)
    store.path_for("key").write_bytes(b"\xff\xfe\x00")
    assert store.load("key") is None
