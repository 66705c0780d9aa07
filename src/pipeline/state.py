# src/pipeline/state.py - v2
"""Generation state machine.

normalizing -> cache_check -> generating -> validating -> caching -> done
cache_check -> done on a cache hit; normalizing -> generating when the
cache is disabled; failed is reachable only from normalizing.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class GenerationState(str, Enum):
    PENDING = "pending"
    NORMALIZING = "normalizing"
    CACHE_CHECK = "cache_check"
    GENERATING = "generating"
    VALIDATING = "validating"
    CACHING = "caching"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: dict[GenerationState, frozenset[GenerationState]] = {
    GenerationState.PENDING: frozenset({GenerationState.NORMALIZING}),
    GenerationState.NORMALIZING: frozenset({
        GenerationState.CACHE_CHECK, GenerationState.GENERATING, GenerationState.FAILED,
    }),
    GenerationState.CACHE_CHECK: frozenset({GenerationState.DONE, GenerationState.GENERATING}),
    GenerationState.GENERATING: frozenset({GenerationState.VALIDATING}),
    GenerationState.VALIDATING: frozenset({GenerationState.CACHING, GenerationState.DONE}),
    GenerationState.CACHING: frozenset({GenerationState.DONE}),
    GenerationState.DONE: frozenset(),
    GenerationState.FAILED: frozenset(),
}


class IllegalTransition(RuntimeError):
    """Raised on a transition the state machine does not allow."""


class GenerationRun(BaseModel):
    """Mutable record of one generate() call."""

    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    state: GenerationState = GenerationState.PENDING
    history: list[GenerationState] = Field(default_factory=list)
    fingerprint: str | None = None
    t0: float = Field(default_factory=time.monotonic, exclude=True)

    def advance(self, to: GenerationState) -> None:
        if to not in _TRANSITIONS[self.state]:
            raise IllegalTransition(f"{self.state.value} -> {to.value}")
        self.history.append(self.state)
        self.state = to

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.t0) * 1000)

    @property
    def terminal(self) -> bool:
        return self.state in (GenerationState.DONE, GenerationState.FAILED)
