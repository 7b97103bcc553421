from dataclasses import dataclass, field
from typing import Optional, Dict, Any


class SolverServiceError(RuntimeError):
    """The generative model could not produce a solution."""


@dataclass
class SolverInput:
    problem_text: str
    source: str = "text"  # "text" or "image"

@dataclass
class SolverOutput:
    problem_text: str
    raw_response: str
    final_answer: Optional[str]  # value inside "(Answer: ...)" if the model followed the format
    processing_metadata: Dict[str, Any] = field(default_factory=dict)
