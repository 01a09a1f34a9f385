"""Tests for taskline.execution.result — the state/status machine."""

import pytest

from taskline import Task
from taskline.core.errors import FrozenError, InvalidTransitionError
from taskline.execution.chain import Chain
from taskline.execution.fault import Failed, Skipped
from taskline.execution.result import STATES, STATUSES, Result, State, Status


class Plain(Task):
    def work(self):
        pass


class Child(Task):
    def work(self):
        pass


@pytest.fixture
def result() -> Result:
    return Plain().result


class TestConstants:
    """State and status vocabularies."""

    def test_states(self):
        assert STATES == ("initialized", "executing", "complete", "interrupted")

    def test_statuses(self):
        assert STATUSES == ("success", "skipped", "failed")

    def test_enums_compare_equal_to_strings(self):
        assert State.COMPLETE == "complete"
        assert Status.FAILED == "failed"


class TestInitialResult:
    """A freshly constructed result."""

    def test_defaults(self, result):
        assert result.state == "initialized"
        assert result.status == "success"
        assert result.reason is None
        assert result.cause is None
        assert result.metadata == {}

    def test_predicates(self, result):
        assert result.is_initialized
        assert result.is_success
        assert result.is_good
        assert not result.is_bad
        assert not result.is_executed

    def test_outcome_is_state_while_initialized(self, result):
        assert result.outcome == "initialized"

    def test_delegates_to_task(self, result):
        assert result.context is result.task.context
        assert result.chain is result.task.chain
        assert result.index == 0


class TestStateTransitions:
    """initialized → executing → complete | interrupted."""

    def test_executing_then_complete(self, result):
        result.executing()
        result.complete()
        assert result.is_complete
        assert result.is_executed

    def test_executing_is_idempotent(self, result):
        result.executing()
        result.executing()
        assert result.is_executing

    def test_complete_requires_executing(self, result):
        with pytest.raises(InvalidTransitionError, match="can only transition to complete from executing"):
            result.complete()

    def test_executing_requires_initialized(self, result):
        result.executing()
        result.complete()
        with pytest.raises(InvalidTransitionError):
            result.executing()

    def test_interrupt_from_initialized(self, result):
        result.interrupt()
        assert result.is_interrupted

    def test_interrupt_after_complete_rejected(self, result):
        result.executing()
        result.complete()
        with pytest.raises(InvalidTransitionError, match="cannot transition to interrupted from complete"):
            result.interrupt()

    def test_executed_completes_success(self, result):
        result.executing()
        result.executed()
        assert result.is_complete

    def test_executed_interrupts_non_success(self, result):
        result.executing()
        result.fail("nope", halt=False)
        result.executed()
        assert result.is_interrupted


class TestStatusTransitions:
    """success → skipped | failed."""

    def test_skip_without_halt(self, result):
        result.skip("not today", halt=False, code="later")
        assert result.is_skipped
        assert result.reason == "not today"
        assert result.metadata == {"code": "later", "reason": "not today"}
        assert result.is_good
        assert result.is_bad

    def test_skip_halts_by_default(self, result):
        with pytest.raises(Skipped) as exc_info:
            result.skip("not today")
        assert exc_info.value.result is result

    def test_fail_halts_by_default(self, result):
        with pytest.raises(Failed, match="declined"):
            result.fail("declined")
        assert result.is_failed
        assert not result.is_good

    def test_default_reason(self, result):
        result.fail(halt=False)
        assert result.reason == "no reason given"
        assert result.metadata["reason"] == "no reason given"

    def test_cause_recorded(self, result):
        error = ValueError("bad")
        result.fail("bad", halt=False, cause=error)
        assert result.cause is error

    def test_same_status_is_noop(self, result):
        result.skip("first", halt=False)
        result.skip("second", halt=False)
        assert result.reason == "first"

    def test_cross_transition_rejected(self, result):
        result.skip("first", halt=False)
        with pytest.raises(InvalidTransitionError, match="can only transition to failed from success"):
            result.fail("second", halt=False)

    def test_halt_noop_on_success(self, result):
        result.halt()
        assert result.is_success


class TestThrow:
    """Adopting another result's outcome."""

    def test_adopts_failed_result(self):
        parent = Plain().result
        child = Child().result
        child.fail("upstream", halt=False, code=500)

        parent.throw(child, halt=False, retried=True)

        assert parent.is_failed
        assert parent.reason == "upstream"
        assert parent.state == child.state
        assert parent.metadata == {"code": 500, "reason": "upstream", "retried": True}

    def test_halts_with_own_result(self):
        parent = Plain().result
        child = Child().result
        child.skip("later", halt=False)

        with pytest.raises(Skipped) as exc_info:
            parent.throw(child)

        assert exc_info.value.result is parent

    def test_success_result_is_ignored(self):
        parent = Plain().result
        child = Child().result
        parent.throw(child)
        assert parent.is_success

    def test_throwing_self_only_sets_missing_cause(self, result):
        result.fail("x", halt=False)
        first = RuntimeError("first")
        result.throw(result, halt=False, cause=first)
        result.throw(result, halt=False, cause=RuntimeError("second"))
        assert result.cause is first

    def test_rejects_non_result(self, result):
        with pytest.raises(TypeError, match="must be a Result"):
            result.throw("failed")


class TestProvenance:
    """caused_failure / threw_failure navigation."""

    def test_success_has_no_provenance(self, result):
        assert result.caused_failure is None
        assert result.threw_failure is None
        assert not result.is_thrown_failure

    def test_single_failure_caused_and_threw_itself(self, result):
        result.fail("x", halt=False)
        assert result.caused_failure is result
        assert result.threw_failure is result
        assert result.is_caused_failure
        assert result.is_threw_failure
        assert result.outcome == "failed"

    def test_thrown_failure_points_downstream(self):
        tasks = [Plain(), Child()]
        for task in tasks:
            task.chain = Chain.build(task.result)
        parent, child = (task.result for task in tasks)

        child.executing()
        child.fail("x", halt=False)
        child.executed()
        parent.throw(child, halt=False)

        assert parent.caused_failure is child
        assert parent.threw_failure is child
        assert parent.is_thrown_failure
        assert not child.is_thrown_failure
        assert parent.outcome == "interrupted"
        assert child.outcome == "failed"


class TestHandle:
    """Fluent handlers keyed by state, status or predicate."""

    def test_matching_handler_called(self, result):
        seen = []
        result.handle("success", seen.append).handle("failed", seen.append)
        assert seen == [result]

    def test_predicate_keys(self, result):
        seen = []
        result.handle("good", lambda r: seen.append("good")).handle("bad", lambda r: seen.append("bad"))
        assert seen == ["good"]

    def test_unknown_key(self, result):
        with pytest.raises(ValueError, match="unknown result handler"):
            result.handle("exploded", print)


class TestPatternMatching:
    """Positional match on (state, status)."""

    def test_match_args(self, result):
        result.executing()
        result.complete()

        match result:
            case Result("complete", "success"):
                matched = True
            case _:
                matched = False

        assert matched


class TestFreeze:
    """Finalized results are immutable."""

    def test_mutators_raise(self, result):
        result.freeze()
        assert result.is_frozen
        with pytest.raises(FrozenError, match="cannot modify frozen Result"):
            result.skip("x", halt=False)
        with pytest.raises(FrozenError):
            result.executing()
        with pytest.raises(FrozenError):
            result.reason = "changed"

    def test_metadata_read_only(self, result):
        result.freeze()
        with pytest.raises(TypeError):
            result.metadata["x"] = 1

    def test_freeze_idempotent(self, result):
        result.freeze()
        result.freeze()
        assert result.is_frozen


class TestSerialization:
    """to_dict and string rendering."""

    def test_to_dict_success(self, result):
        data = result.to_dict()
        assert data["class"] == "Plain"
        assert data["type"] == "Task"
        assert data["index"] == 0
        assert data["state"] == "initialized"
        assert data["status"] == "success"
        assert data["outcome"] == "initialized"
        assert "caused_failure" not in data

    def test_to_dict_failure_references(self, result):
        result.fail("x", halt=False)
        data = result.to_dict()
        assert data["caused_failure"] == {"index": 0, "class": "Plain", "id": result.task.id}
        assert data["threw_failure"]["class"] == "Plain"

    def test_str_contains_pairs(self, result):
        assert "status='success'" in str(result)

    def test_repr(self, result):
        assert repr(result) == "<Result task=Plain state=initialized status=success>"
