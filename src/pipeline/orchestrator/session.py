from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, Optional
import logging
import uuid

from .types import RunContext, InputKind, WAITING_FOR_INPUT

logger = logging.getLogger(__name__)

# committed runs kept per chat, oldest dropped first
HISTORY_LIMIT = 50


@dataclass
class ChatSession:
    """
    One chat panel. Only the most recently started run of the current
    generation is shown; a run that finishes after it was superseded, or
    after a reset, is dropped instead of overwriting newer state.
    """
    chat_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.utcnow)
    last_accessed: datetime = field(default_factory=datetime.utcnow)
    generation: int = 0
    current: Optional[RunContext] = None
    history: Deque[RunContext] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))
    discarded_runs: int = 0

    def begin_run(self, input_kind: InputKind) -> RunContext:
        run = RunContext(input_kind=input_kind, generation=self.generation)
        self.current = run
        self.last_accessed = datetime.utcnow()
        logger.debug(f"Chat {self.chat_id}: started run {run.request_id} ({input_kind.value})")
        return run

    def is_latest(self, run: RunContext) -> bool:
        return (
            self.current is not None
            and run.generation == self.generation
            and run.request_id == self.current.request_id
        )

    def commit(self, run: RunContext) -> bool:
        """Record a finished run; returns False when the run was stale and got discarded."""
        if not self.is_latest(run):
            self.discarded_runs += 1
            logger.warning(f"Chat {self.chat_id}: discarding stale result of run {run.request_id}")
            return False
        self.history.append(run)
        self.last_accessed = datetime.utcnow()
        return True

    def reset(self):
        """New chat: forget everything; runs still in flight will be discarded on arrival."""
        self.generation += 1
        self.current = None
        self.history.clear()
        self.last_accessed = datetime.utcnow()
        logger.info(f"Chat {self.chat_id}: reset to generation {self.generation}")

    @property
    def extracted_text(self) -> str:
        return self.current.extracted_text if self.current else ""

    @property
    def solution_display(self) -> str:
        if self.current is None or not self.current.solution_text:
            return WAITING_FOR_INPUT
        return self.current.solution_text
