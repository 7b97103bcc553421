"""
Pipeline orchestrator tying OCR, classification, solving and sanitizing together.

Each submission gets its own RunContext. Every failure is converted to one of
the fixed placeholder messages, so callers never see an exception from a run.
"""

import asyncio
import logging
from typing import Optional, Union, BinaryIO

from src.models.manager import ModelManager
from src.models.services.ocr_base import OcrEngine, OcrServiceError
from src.utils.image_converter import to_base64, EncodingFailed
from src.pipeline.classifier.classifier import require_math_problem, DEFAULT_POLICY
from src.pipeline.classifier.types import ClassificationPolicy, ClassificationRejection, Verdict
from src.pipeline.solver.solver import SolverPipeline
from src.pipeline.solver.types import SolverServiceError
from src.pipeline.formatting.sanitizer import sanitize
from src.pipeline.formatting.renderer import HtmlRenderer

from .session import ChatSession
from .types import (
    RunContext, RunStatus, Stage, Outcome, InputKind,
    NO_EQUATION_DETECTED, EXTRACTION_ERROR_TEXT, EXTRACTION_ERROR_SOLUTION,
    SOLVER_ERROR_MESSAGE, REJECTION_MESSAGES,
)

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, BinaryIO]

_REJECTION_OUTCOMES = {
    Verdict.REJECTED_AS_CODE: Outcome.REJECTED_AS_CODE,
    Verdict.REJECTED_AS_NON_MATH: Outcome.REJECTED_AS_NON_MATH,
}


class SolveOrchestrator:
    def __init__(self, model_manager: ModelManager, ocr: Optional[OcrEngine] = None, solver: Optional[SolverPipeline] = None, policy: ClassificationPolicy = DEFAULT_POLICY, renderer: Optional[HtmlRenderer] = None):
        self.model_manager = model_manager
        self._ocr = ocr
        self.solver = solver or SolverPipeline(model_manager)
        self.policy = policy
        self.renderer = renderer or HtmlRenderer()

    @property
    def ocr(self) -> OcrEngine:
        if self._ocr is None:
            self._ocr = self.model_manager.ocr
        return self._ocr

    async def submit_text(self, session: ChatSession, text: str) -> Optional[RunContext]:
        """Run typed text through the pipeline. Blank input is ignored and returns None."""
        if not text or not text.strip():
            return None
        run = session.begin_run(InputKind.TEXT)
        await self.run_text(run, text)
        session.commit(run)
        return run

    async def submit_image(self, session: ChatSession, image: ImageSource) -> RunContext:
        run = session.begin_run(InputKind.IMAGE)
        await self.run_image(run, image)
        session.commit(run)
        return run

    async def run_text(self, run: RunContext, text: str) -> RunContext:
        problem = text.strip()
        run.extracted_text = problem
        await self._classify_and_solve(run, problem)
        return run

    async def run_image(self, run: RunContext, image: ImageSource) -> RunContext:
        run.advance(Stage.EXTRACTING)
        try:
            encoded = to_base64(image)
            text = await self.ocr.extract_text(encoded)
        except (EncodingFailed, OcrServiceError) as e:
            logger.warning(f"Run {run.request_id}: text extraction failed: {e}")
            return self._fail_extraction(run, e)
        except Exception as e:
            logger.exception(f"Run {run.request_id}: unexpected error during text extraction")
            return self._fail_extraction(run, e)

        if not text or not text.strip():
            logger.info(f"Run {run.request_id}: no text detected in image")
            run.extracted_text = ""
            run.finish(Outcome.NO_TEXT, NO_EQUATION_DETECTED)
            return run

        run.extracted_text = text
        await self._classify_and_solve(run, text)
        return run

    def _fail_extraction(self, run: RunContext, error: BaseException) -> RunContext:
        run.extracted_text = EXTRACTION_ERROR_TEXT
        run.finish(Outcome.EXTRACTION_FAILED, EXTRACTION_ERROR_SOLUTION, status=RunStatus.FAILED, error=error)
        return run

    async def _classify_and_solve(self, run: RunContext, problem: str):
        run.advance(Stage.CLASSIFYING)
        try:
            run.verdict = require_math_problem(problem, self.policy)
        except ClassificationRejection as rejection:
            run.verdict = rejection.verdict
            run.finish(_REJECTION_OUTCOMES[rejection.verdict], REJECTION_MESSAGES[rejection.verdict])
            return

        run.advance(Stage.SOLVING)
        try:
            # the provider clients block, keep them off the event loop
            output = await asyncio.to_thread(self.solver.solve, problem)
        except SolverServiceError as e:
            logger.warning(f"Run {run.request_id}: solver failed: {e}")
            run.finish(Outcome.SOLVER_FAILED, SOLVER_ERROR_MESSAGE, status=RunStatus.FAILED, error=e)
            return
        except Exception as e:
            logger.exception(f"Run {run.request_id}: unexpected error while solving")
            run.finish(Outcome.SOLVER_FAILED, SOLVER_ERROR_MESSAGE, status=RunStatus.FAILED, error=e)
            return

        run.final_answer = output.final_answer
        run.metadata.update(output.processing_metadata)
        run.finish(Outcome.SOLVED, sanitize(output.raw_response, self.renderer))
        logger.info(f"Run {run.request_id}: solved in {run.processing_time:.2f}s")
