"""Batch strategies for bulk order updates.

Both strategies select targets first and mutate them afterwards. Nothing
re-checks a target between selection and mutation, so a concurrent change
in that window is not detected.
"""

from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

T = TypeVar("T")


class StrictBatch(Generic[T]):
    """All or nothing: ``check`` must pass for every target before any is mutated.

    ``check`` raises to reject a target; the first rejection aborts the batch.
    """

    name = "strict"

    def __init__(self, check: Callable[[T], None]) -> None:
        self.check = check

    def select(self, targets: Iterable[T]) -> list[T]:
        selected = list(targets)
        for target in selected:
            self.check(target)
        return selected

    def apply(self, selected: list[T], mutate: Callable[[T], None]) -> int:
        for target in selected:
            mutate(target)
        return len(selected)

    def run(self, targets: Iterable[T], mutate: Callable[[T], None]) -> int:
        return self.apply(self.select(targets), mutate)


class BestEffortBatch(Generic[T]):
    """Mutate the targets ``accept`` returns True for and skip the rest silently."""

    name = "best_effort"

    def __init__(self, accept: Callable[[T], bool]) -> None:
        self.accept = accept

    def select(self, targets: Iterable[T]) -> list[T]:
        return [target for target in targets if self.accept(target)]

    def apply(self, selected: list[T], mutate: Callable[[T], None]) -> int:
        for target in selected:
            mutate(target)
        return len(selected)

    def run(self, targets: Iterable[T], mutate: Callable[[T], None]) -> int:
        return self.apply(self.select(targets), mutate)
