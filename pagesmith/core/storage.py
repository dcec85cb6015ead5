"""Persistence stores and page snapshots."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Dict, Optional, Protocol

from ..errors import PersistenceError
from .models import BlockInstance, PageState

log = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class PersistenceStore(Protocol):
    def save(self, key: str, blob: str) -> None: ...

    def load(self, key: str) -> Optional[str]: ...

    def clear(self, key: str) -> None: ...


class MemoryStore:
    """Keeps blobs in a dict; handy for tests and throwaway sessions."""

    def __init__(self, blobs: Optional[Dict[str, str]] = None) -> None:
        self.blobs: Dict[str, str] = dict(blobs or {})

    def save(self, key: str, blob: str) -> None:
        self.blobs[key] = blob

    def load(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def clear(self, key: str) -> None:
        self.blobs.pop(key, None)


class JsonFileStore:
    """Stores each key as ``<key>.json`` inside ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        name = re.sub(r"[^A-Za-z0-9_.-]+", "_", key).strip("._") or "state"
        return self.directory / f"{name}.json"

    def save(self, key: str, blob: str) -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}_", dir=path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(blob)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(f"Could not save {key!r} to {path}: {exc}") from exc

    def load(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("Could not read %s: %s", path, exc)
            return None

    def clear(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Could not clear {key!r} at {path}: {exc}") from exc


def encode_snapshot(state: PageState, saved_at: Optional[int] = None) -> str:
    payload = {
        "version": SNAPSHOT_VERSION,
        "saved_at": int(time.time() * 1000) if saved_at is None else saved_at,
        **state.to_dict(),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def decode_snapshot(blob: object) -> Optional[PageState]:
    """Parse a stored snapshot; anything unusable comes back as ``None``."""

    if blob is None:
        return None
    if isinstance(blob, (bytes, bytearray)):
        try:
            blob = blob.decode("utf-8")
        except UnicodeDecodeError:
            log.warning("Discarding saved page: snapshot is not UTF-8")
            return None
    if not isinstance(blob, str):
        log.warning("Discarding saved page: unexpected blob type %s", type(blob).__name__)
        return None
    try:
        data = json.loads(blob)
    except (ValueError, RecursionError) as exc:
        log.warning("Discarding saved page: %s", exc)
        return None
    problem = _snapshot_problem(data)
    if problem:
        log.warning("Discarding saved page: %s", problem)
        return None
    blocks = [BlockInstance.from_dict(item) for item in data["blocks"]]
    return PageState(blocks=blocks, title=data.get("title") or PageState().title)


def _snapshot_problem(data: object) -> Optional[str]:
    if not isinstance(data, dict):
        return "snapshot is not an object"
    if data.get("version") != SNAPSHOT_VERSION:
        return f"unsupported snapshot version {data.get('version')!r}"
    if not isinstance(data.get("title", ""), str):
        return "title is not a string"
    blocks = data.get("blocks")
    if not isinstance(blocks, list):
        return "blocks is not a list"
    seen = set()
    for index, item in enumerate(blocks):
        if not isinstance(item, dict):
            return f"block {index} is not an object"
        instance_id = item.get("instance_id")
        if not isinstance(instance_id, str) or not instance_id:
            return f"block {index} has no instance id"
        if not isinstance(item.get("template_id"), str):
            return f"block {index} has no template id"
        content = item.get("content", {})
        if not isinstance(content, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in content.items()
        ):
            return f"block {index} has malformed content"
        if instance_id in seen:
            return f"duplicate instance id {instance_id!r}"
        seen.add(instance_id)
    return None
