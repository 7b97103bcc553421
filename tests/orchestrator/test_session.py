from src.pipeline.orchestrator.session import ChatSession, HISTORY_LIMIT
from src.pipeline.orchestrator.types import (
    InputKind, Outcome, RunStatus, Stage, RunContext, WAITING_FOR_INPUT, SOLVER_ERROR_MESSAGE,
)


class TestRunContext:
    def test_new_run_is_pending(self):
        run = RunContext(input_kind=InputKind.TEXT, generation=0)
        assert run.status is RunStatus.PENDING
        assert run.stage is Stage.IDLE
        assert run.processing_time is None

    def test_finish_records_error_class_only(self):
        run = RunContext(input_kind=InputKind.TEXT, generation=0)
        run.advance(Stage.SOLVING)
        run.finish(Outcome.SOLVER_FAILED, SOLVER_ERROR_MESSAGE, status=RunStatus.FAILED, error=TimeoutError("secret detail"))

        assert run.stage is Stage.DONE
        assert run.last_error == "TimeoutError"
        assert run.processing_time is not None and run.processing_time >= 0


class TestChatSession:
    def test_idle_session_shows_waiting_text(self):
        session = ChatSession()
        assert session.solution_display == WAITING_FOR_INPUT
        assert session.extracted_text == ""

    def test_request_ids_are_unique(self):
        session = ChatSession()
        first = session.begin_run(InputKind.TEXT)
        second = session.begin_run(InputKind.TEXT)
        assert first.request_id != second.request_id
        assert session.is_latest(second)
        assert not session.is_latest(first)

    def test_commit_latest_run(self):
        session = ChatSession()
        run = session.begin_run(InputKind.TEXT)
        run.finish(Outcome.SOLVED, "<b>4</b>")
        assert session.commit(run) is True
        assert list(session.history) == [run]
        assert session.solution_display == "<b>4</b>"

    def test_superseded_run_is_not_committed(self):
        session = ChatSession()
        old = session.begin_run(InputKind.IMAGE)
        new = session.begin_run(InputKind.TEXT)
        old.finish(Outcome.SOLVED, "old")
        assert session.commit(old) is False
        assert session.current is new
        assert session.discarded_runs == 1

    def test_reset_bumps_generation(self):
        session = ChatSession()
        run = session.begin_run(InputKind.TEXT)
        session.reset()
        assert session.generation == 1
        assert session.current is None
        assert session.commit(run) is False

    def test_pending_run_shows_waiting_text(self):
        session = ChatSession()
        session.begin_run(InputKind.IMAGE)
        assert session.solution_display == WAITING_FOR_INPUT

    def test_history_keeps_only_recent_runs(self):
        session = ChatSession()
        runs = []
        for _ in range(HISTORY_LIMIT + 5):
            run = session.begin_run(InputKind.TEXT)
            run.finish(Outcome.SOLVED, "ok")
            session.commit(run)
            runs.append(run)

        assert len(session.history) == HISTORY_LIMIT
        assert list(session.history) == runs[-HISTORY_LIMIT:]
        assert session.current is runs[-1]
