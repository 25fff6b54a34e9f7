"""Splitting the selected projects into bounded Gradle runs."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from itertools import islice
from typing import TypeVar

T = TypeVar("T")


def partition(projects: Iterable[T], threshold: int) -> Iterator[list[T]]:
    """Yield consecutive slices of *projects* holding at most *threshold* items.

    Order is preserved and the last slice may be shorter. No projects means
    no slices at all.

    Raises:
        ValueError: If *threshold* is smaller than 1.
    """
    if threshold < 1:
        raise ValueError(f"threshold must be at least 1, got {threshold}")
    it = iter(projects)
    while batch := list(islice(it, threshold)):
        yield batch
