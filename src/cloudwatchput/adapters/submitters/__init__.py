"""Submission adapters that do not need a backend."""

from cloudwatchput.adapters.submitters.in_memory import InMemorySubmitter, Submission

__all__ = ["InMemorySubmitter", "Submission"]
