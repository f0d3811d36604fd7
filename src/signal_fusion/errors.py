"""Exceptions raised at the engine's outer boundaries."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Symbol or engine parameters rejected at registration time."""

    def __init__(self, subject: str, problems: list[str]) -> None:
        self.subject = subject
        self.problems = problems
        super().__init__(f"{subject}: {'; '.join(problems)}")


class ExecutionError(RuntimeError):
    """The execution adapter refused or failed to apply a decision."""
