"""The page being edited: an ordered list of block instances that saves itself."""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, wait
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple, Union

from ..errors import PersistenceError, UnknownTemplate
from .models import BlockInstance, PageState
from .registry import BlockRegistry
from .storage import PersistenceStore, decode_snapshot, encode_snapshot

log = logging.getLogger(__name__)

DEFAULT_STATE_KEY = "pagesmith_canvas_state"


class Outcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    NOOP = "noop"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


PersistErrorSink = Callable[[Exception], None]


class PageStore:
    """Owns the page state and mirrors every change to a persistence store.

    Mutations happen on the caller's thread and take effect immediately. Each
    successful mutation snapshots the page and queues a save on a single
    background worker, so saves land in order and a slow store never holds up
    the next edit. Save failures are logged and reported to
    ``on_persist_error``; the in-memory page stays authoritative.
    """

    def __init__(
        self,
        registry: BlockRegistry,
        persistence: PersistenceStore,
        key: str = DEFAULT_STATE_KEY,
        on_persist_error: Optional[PersistErrorSink] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.registry = registry
        self.persistence = persistence
        self.key = key
        self.on_persist_error = on_persist_error
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="pagesmith-autosave")
        self._pending: List[Future] = []
        self._state = self._restore()

    # lifecycle -----------------------------------------------------------
    def _restore(self) -> PageState:
        try:
            blob = self.persistence.load(self.key)
        except Exception as exc:
            log.warning("Could not load saved page %r: %s", self.key, exc)
            return PageState()
        if blob is None:
            log.debug("No saved page under %r", self.key)
            return PageState()
        state = decode_snapshot(blob)
        if state is None:
            return PageState()
        missing = [b.template_id for b in state.blocks if b.template_id not in self.registry]
        if missing:
            log.warning("Restored page references unknown templates: %s", ", ".join(missing))
        log.debug("Restored %d blocks from %r", len(state.blocks), self.key)
        return state

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait until every queued save has finished and any failure was reported."""

        pending, self._pending = self._pending, []
        wait(pending, timeout=timeout)

    def close(self) -> None:
        self.flush()
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "PageStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # reading -------------------------------------------------------------
    @property
    def state(self) -> PageState:
        """A detached copy of the current page."""

        return self._state.copy()

    @property
    def blocks(self) -> Tuple[BlockInstance, ...]:
        return tuple(block.copy() for block in self._state.blocks)

    @property
    def title(self) -> str:
        return self._state.title

    def __len__(self) -> int:
        return len(self._state.blocks)

    def __iter__(self) -> Iterator[BlockInstance]:
        return iter(self.blocks)

    def index_of(self, instance_id: str) -> int:
        for index, block in enumerate(self._state.blocks):
            if block.instance_id == instance_id:
                return index
        return -1

    def get_block(self, instance_id: str) -> Optional[BlockInstance]:
        index = self.index_of(instance_id)
        return self._state.blocks[index].copy() if index >= 0 else None

    # mutations -----------------------------------------------------------
    def add_block(self, template_id: str) -> str:
        if template_id not in self.registry:
            raise UnknownTemplate(template_id)
        instance = BlockInstance(self._new_instance_id(), template_id)
        self._state.blocks.append(instance)
        log.debug("Added %s (%s) at position %d",
                  instance.instance_id, template_id, len(self._state.blocks) - 1)
        self._schedule_save()
        return instance.instance_id

    def update_block_content(self, instance_id: str, selector: str, value: str) -> Outcome:
        index = self.index_of(instance_id)
        if index < 0:
            log.info("Cannot update %s: no such block", instance_id)
            return Outcome.NOT_FOUND
        self._state.blocks[index].content[selector] = str(value)
        self._schedule_save()
        return Outcome.OK

    def delete_block(self, instance_id: str) -> Outcome:
        index = self.index_of(instance_id)
        if index < 0:
            log.info("Cannot delete %s: no such block", instance_id)
            return Outcome.NOT_FOUND
        del self._state.blocks[index]
        self._schedule_save()
        return Outcome.OK

    def move_block(self, instance_id: str, direction: Union[Direction, str]) -> Outcome:
        step = -1 if Direction(direction) is Direction.UP else 1
        index = self.index_of(instance_id)
        if index < 0:
            log.info("Cannot move %s: no such block", instance_id)
            return Outcome.NOT_FOUND
        target = index + step
        blocks = self._state.blocks
        if target < 0 or target >= len(blocks):
            return Outcome.NOOP
        blocks[index], blocks[target] = blocks[target], blocks[index]
        self._schedule_save()
        return Outcome.OK

    def set_title(self, title: str) -> None:
        self._state.title = title
        self._schedule_save()

    def reset(self) -> None:
        """Empty the page and drop its saved snapshot."""

        self._state = PageState()
        self.flush()
        try:
            self.persistence.clear(self.key)
        except Exception as exc:
            self._report(exc, "Could not clear saved page %r: %s")

    # internals -----------------------------------------------------------
    def _new_instance_id(self) -> str:
        taken = set(self._state.instance_ids())
        while True:
            candidate = f"block-{uuid.uuid4().hex[:12]}"
            if candidate not in taken:
                return candidate

    def _schedule_save(self) -> None:
        blob = encode_snapshot(self._state)
        self._pending = [f for f in self._pending if not f.done()]
        try:
            future = self._executor.submit(self._save, blob)
        except RuntimeError as exc:
            self._report(PersistenceError(f"Autosave unavailable: {exc}"))
            return
        self._pending.append(future)

    def _save(self, blob: str) -> None:
        # Runs on the autosave worker; the future only completes once the
        # failure has been reported.
        try:
            self.persistence.save(self.key, blob)
        except Exception as exc:
            self._report(exc)

    def _report(self, exc: Exception, message: str = "Could not save page %r: %s") -> None:
        log.warning(message, self.key, exc)
        if self.on_persist_error is not None:
            try:
                self.on_persist_error(exc)
            except Exception:
                log.exception("Persist error handler failed")
