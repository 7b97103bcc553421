import re
import logging
from typing import Optional

from src.models.manager import ModelManager
from .types import SolverInput, SolverOutput, SolverServiceError

logger = logging.getLogger(__name__)

SOLVE_TASK = "solve"
SOLVE_PROMPT = "solver/solve@v1"

_ANSWER_PATTERN = re.compile(r'\(\s*Answer:\s*(.+?)\s*\)[.!]?[ \t]*$', re.IGNORECASE | re.MULTILINE)


class SolverPipeline:
    def __init__(self, manager: ModelManager, prompt_ref: str = SOLVE_PROMPT):
        self.model_manager = manager
        self.prompt_ref = prompt_ref

    def solve(self, problem_text: str) -> SolverOutput:
        return self.process(SolverInput(problem_text=problem_text))

    def process(self, solver_input: SolverInput) -> SolverOutput:
        """
        Send one accepted problem to the configured model. A single attempt is
        made; any provider failure surfaces as SolverServiceError.
        """
        logger.info(f"Solving {solver_input.source} problem: {solver_input.problem_text[:100]!r}")
        try:
            response = self.model_manager.call(
                task=SOLVE_TASK,
                prompt_ref=self.prompt_ref,
                variables={"problem_text": solver_input.problem_text},
            )
        except Exception as e:
            logger.error(f"Solver call failed ({type(e).__name__}): {e}")
            raise SolverServiceError(f"Solver request failed: {e}") from e

        content = response.content or ""
        if not content.strip():
            raise SolverServiceError("Solver returned an empty response")

        return SolverOutput(
            problem_text=solver_input.problem_text,
            raw_response=content,
            final_answer=self._extract_final_answer(content),
            processing_metadata={
                "prompt_version": self.prompt_ref,
                "model_used": response.meta.get("model"),
                "latency": response.meta.get("latency"),
                "raw_response_length": len(content),
            },
        )

    def _extract_final_answer(self, content: str) -> Optional[str]:
        # prompt asks for "(Answer: 42)"; take the last one in case the model restates it
        matches = _ANSWER_PATTERN.findall(content)
        if matches:
            return matches[-1].strip().strip("*$").strip()
        return None
