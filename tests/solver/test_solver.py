from unittest.mock import Mock

import pytest

from src.models.manager import ModelManager
from src.models.providers.base import ModelResponse, ModelError, ModelTimeout
from src.pipeline.solver.solver import SolverPipeline, SOLVE_TASK, SOLVE_PROMPT
from src.pipeline.solver.types import SolverServiceError


@pytest.fixture
def manager():
    return Mock(spec=ModelManager)


def respond(content, model="gemini-1.5-flash"):
    return ModelResponse(content=content, raw=None, meta={"model": model, "latency": 0.3})


class TestSolverPipeline:
    def test_solve_calls_configured_task(self, manager):
        manager.call.return_value = respond("2 + 2 = 4\n(Answer: 4)")

        output = SolverPipeline(manager).solve("2+2=")

        manager.call.assert_called_once_with(
            task=SOLVE_TASK,
            prompt_ref=SOLVE_PROMPT,
            variables={"problem_text": "2+2="},
        )
        assert output.problem_text == "2+2="
        assert output.raw_response == "2 + 2 = 4\n(Answer: 4)"
        assert output.final_answer == "4"
        assert output.processing_metadata["model_used"] == "gemini-1.5-flash"
        assert output.processing_metadata["prompt_version"] == SOLVE_PROMPT

    @pytest.mark.parametrize("content,answer", [
        ("so x = 2\n(Answer: x = 2)", "x = 2"),
        ("(Answer: f(3) = 10).", "f(3) = 10"),
        ("(answer: 1)\nrechecking...\n(Answer: 12)", "12"),
        ("**(Answer: $42$)**", None),
        ("The result is 7.", None),
    ])
    def test_final_answer_extraction(self, manager, content, answer):
        manager.call.return_value = respond(content)
        assert SolverPipeline(manager).solve("x").final_answer == answer

    @pytest.mark.parametrize("error", [
        ModelError("500 from upstream"),
        ModelTimeout("read timed out"),
        ValueError("Unknown task: solve"),
    ])
    def test_failures_are_wrapped(self, manager, error):
        manager.call.side_effect = error
        with pytest.raises(SolverServiceError) as exc_info:
            SolverPipeline(manager).solve("2+2")
        assert exc_info.value.__cause__ is error
        assert manager.call.call_count == 1

    def test_empty_response_is_an_error(self, manager):
        manager.call.return_value = respond("   ")
        with pytest.raises(SolverServiceError):
            SolverPipeline(manager).solve("2+2")

    def test_custom_prompt_ref(self, manager):
        manager.call.return_value = respond("ok (Answer: 1)")
        SolverPipeline(manager, prompt_ref="solver/solve@v2").solve("1*1")
        assert manager.call.call_args.kwargs["prompt_ref"] == "solver/solve@v2"
