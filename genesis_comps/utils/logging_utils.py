"""Step logging helpers shared by the flows."""

from __future__ import annotations

import time
from typing import Any

from loguru import logger


def bind_context(**kwargs: Any):
    """Return a logger with bound contextual fields (step/job/page)."""
    return logger.bind(**{k: v for k, v in kwargs.items() if v is not None})


def step_started(step: str, **context: Any) -> None:
    bind_context(step=step, **context).info(f"Starting step: {step}")


def step_finished(step: str, **context: Any) -> None:
    bind_context(step=step, **context).info(f"Completed step: {step}")


def step_failed(step: str, error: BaseException, **context: Any) -> None:
    bind_context(step=step, **context).error(f"Failed step: {step}: {error}")


class Timer:
    """Lightweight context timer for logging durations."""

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000
