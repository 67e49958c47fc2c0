from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from bookletmaker.imposition.core import Blank, CopySource, OutputPlan, impose_booklet
from bookletmaker.imposition.errors import AssemblyFailure, BookletError, InvalidDocument

_LOGGER = logging.getLogger("bookletmaker.imposition")


class DocumentProvider(Protocol):
    def begin(self) -> None: ...

    def get_page_count(self) -> int: ...

    def get_page_size(self, index: int) -> tuple[float, float]: ...

    def copy_page(self, index: int) -> Any: ...

    def create_blank_page(self, width: float, height: float) -> Any: ...

    def append_page(self, handle: Any) -> None: ...

    def serialize(self) -> bytes: ...


class PipelineState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    COMPUTING = "computing"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


_ALLOWED_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.VALIDATING}),
    PipelineState.VALIDATING: frozenset({PipelineState.COMPUTING, PipelineState.FAILED}),
    PipelineState.COMPUTING: frozenset({PipelineState.ASSEMBLING}),
    PipelineState.ASSEMBLING: frozenset({PipelineState.DONE, PipelineState.FAILED}),
    PipelineState.DONE: frozenset(),
    PipelineState.FAILED: frozenset(),
}


@dataclass(frozen=True)
class BookletJobResult:
    state: PipelineState
    transitions: tuple[PipelineState, ...]
    plan: OutputPlan | None = None
    payload: bytes | None = None
    error: BookletError | None = None

    @property
    def ok(self) -> bool:
        return self.state is PipelineState.DONE


def assemble(plan: OutputPlan, provider: DocumentProvider) -> bytes:
    """Build the imposed document described by ``plan`` and return its bytes.

    The provider starts a fresh output document first. Either every entry is
    applied and the serialized output is returned, or an ``AssemblyFailure``
    is raised and nothing is returned.
    """
    try:
        provider.begin()
        for position, entry in enumerate(plan.entries):
            if isinstance(entry, CopySource):
                handle = provider.copy_page(entry.index)
            elif isinstance(entry, Blank):
                handle = provider.create_blank_page(entry.width, entry.height)
            else:
                raise AssemblyFailure(f"unknown placement entry at position {position}: {entry!r}")
            provider.append_page(handle)

        return provider.serialize()
    except AssemblyFailure:
        raise
    except Exception as exc:
        raise AssemblyFailure(f"document assembly failed: {exc}") from exc


class _JobTracker:
    def __init__(self) -> None:
        self.state = PipelineState.IDLE
        self.visited: list[PipelineState] = [PipelineState.IDLE]

    def advance(self, target: PipelineState) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(f"illegal pipeline transition {self.state.value} -> {target.value}")

        _LOGGER.debug(
            "booklet.job.transition",
            extra={
                "event_name": "booklet.job.transition",
                "event_fields": {"from_state": self.state.value, "to_state": target.value},
            },
        )
        self.state = target
        self.visited.append(target)

    def result(self, **fields: Any) -> BookletJobResult:
        return BookletJobResult(state=self.state, transitions=tuple(self.visited), **fields)


def _read_source(provider: DocumentProvider) -> tuple[int, tuple[float, float]]:
    try:
        page_count = provider.get_page_count()
        if page_count < 1:
            raise InvalidDocument("document has no pages")
        return page_count, provider.get_page_size(0)
    except InvalidDocument:
        raise
    except Exception as exc:
        raise InvalidDocument(f"document could not be read: {exc}") from exc


def run_booklet_job(provider: DocumentProvider) -> BookletJobResult:
    """Validate, plan and assemble a booklet, reporting failures as a result value."""
    tracker = _JobTracker()

    tracker.advance(PipelineState.VALIDATING)
    try:
        page_count, reference_size = _read_source(provider)
    except InvalidDocument as exc:
        tracker.advance(PipelineState.FAILED)
        return tracker.result(error=exc)

    tracker.advance(PipelineState.COMPUTING)
    plan = impose_booklet(page_count, reference_size)

    tracker.advance(PipelineState.ASSEMBLING)
    try:
        payload = assemble(plan, provider)
    except AssemblyFailure as exc:
        tracker.advance(PipelineState.FAILED)
        return tracker.result(plan=plan, error=exc)

    tracker.advance(PipelineState.DONE)
    return tracker.result(plan=plan, payload=payload)
