"""Tests for the bulk update strategies, including the unchecked window between select and apply."""

from dataclasses import dataclass

import pytest
from marketplace.errors import InvalidStateError
from marketplace.order.batch import BestEffortBatch, StrictBatch


@dataclass
class _Target:
    name: str
    status: str
    touched: bool = False


def _require_done(target):
    if target.status != "done":
        raise InvalidStateError(f"{target.name} is not done")


def _touch(target):
    target.touched = True


class TestStrictBatch:
    def test_all_valid_applies_to_all(self):
        targets = [_Target("a", "done"), _Target("b", "done")]
        assert StrictBatch(_require_done).run(targets, _touch) == 2
        assert all(t.touched for t in targets)

    def test_one_invalid_rejects_all(self):
        targets = [_Target("a", "done"), _Target("b", "open")]
        with pytest.raises(InvalidStateError):
            StrictBatch(_require_done).run(targets, _touch)
        assert not any(t.touched for t in targets)

    def test_change_after_selection_is_not_detected(self):
        targets = [_Target("a", "done"), _Target("b", "done")]
        batch = StrictBatch(_require_done)

        selected = batch.select(targets)
        targets[1].status = "open"  # concurrent change between check and write
        count = batch.apply(selected, _touch)

        assert count == 2
        assert targets[1].touched


class TestBestEffortBatch:
    def test_skips_non_matching_targets(self):
        targets = [_Target("a", "done"), _Target("b", "open"), _Target("c", "done")]
        count = BestEffortBatch(lambda t: t.status == "done").run(targets, _touch)

        assert count == 2
        assert [t.touched for t in targets] == [True, False, True]

    def test_nothing_matching_returns_zero(self):
        targets = [_Target("a", "open")]
        assert BestEffortBatch(lambda t: t.status == "done").run(targets, _touch) == 0

    def test_change_after_selection_is_not_detected(self):
        targets = [_Target("a", "done")]
        batch = BestEffortBatch(lambda t: t.status == "done")

        selected = batch.select(targets)
        targets[0].status = "open"
        assert batch.apply(selected, _touch) == 1
