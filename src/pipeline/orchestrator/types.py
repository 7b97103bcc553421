from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
import uuid

from src.pipeline.classifier.types import Verdict

# literal strings shown in the solution panel
WAITING_FOR_INPUT = "Waiting for input..."
NO_EQUATION_DETECTED = "No math equation detected."
EXTRACTION_ERROR_TEXT = "Error extracting text."
EXTRACTION_ERROR_SOLUTION = "❌ Error extracting text."
REJECTED_AS_CODE_MESSAGE = "⚠️ This AI only solves math problems. Please enter a valid mathematical problem."
REJECTED_AS_NON_MATH_MESSAGE = "⚠️ This AI only solves math problems. Please enter a valid mathematical expression."
SOLVER_ERROR_MESSAGE = "❌ Error solving equation."

REJECTION_MESSAGES = {
    Verdict.REJECTED_AS_CODE: REJECTED_AS_CODE_MESSAGE,
    Verdict.REJECTED_AS_NON_MATH: REJECTED_AS_NON_MATH_MESSAGE,
}


class Stage(Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    CLASSIFYING = "classifying"
    SOLVING = "solving"
    DONE = "done"


class RunStatus(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Outcome(Enum):
    SOLVED = "solved"
    NO_TEXT = "no_text"
    REJECTED_AS_CODE = "rejected_as_code"
    REJECTED_AS_NON_MATH = "rejected_as_non_math"
    EXTRACTION_FAILED = "extraction_failed"
    SOLVER_FAILED = "solver_failed"


class InputKind(Enum):
    IMAGE = "image"
    TEXT = "text"


@dataclass
class RunContext:
    """State of one pipeline run, from submission to its final solution text."""
    input_kind: InputKind
    generation: int
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    stage: Stage = Stage.IDLE
    status: RunStatus = RunStatus.PENDING
    extracted_text: str = ""
    solution_text: str = ""
    final_answer: Optional[str] = None
    verdict: Optional[Verdict] = None
    outcome: Optional[Outcome] = None
    last_error: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def advance(self, stage: Stage):
        self.stage = stage

    def finish(self, outcome: Outcome, solution_text: str, status: RunStatus = RunStatus.SUCCEEDED, error: Optional[BaseException] = None):
        self.stage = Stage.DONE
        self.outcome = outcome
        self.solution_text = solution_text
        self.status = status
        if error is not None:
            # only the class name is kept; the detail goes to the log
            self.last_error = type(error).__name__
        self.finished_at = datetime.utcnow()

    @property
    def processing_time(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()
