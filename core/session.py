"""UI-facing session: tracks the latest submission and its outcome.

Only one request is meaningful at a time. Submitting a new image while an
earlier one is still running cancels the earlier task; its caller gets
``RequestSupersededError`` and the session reflects the newest submission.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum

from core.schemas import AnalysisResult
from core.settings import Language, ProviderConfig
from core.solver import solve

logger = logging.getLogger("st.session")

Solver = Callable[[str, str, Language, ProviderConfig], Awaitable[AnalysisResult]]


class AppState(StrEnum):
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class RequestSupersededError(Exception):
    """A newer submission replaced this one before it finished."""


@dataclass
class SessionState:
    """Mutable in-memory state for the current submission."""

    status: AppState = AppState.IDLE
    result: AnalysisResult | None = None
    error: Exception | None = None


class SolveSession:
    """Runs submissions through ``solve`` with latest-wins semantics."""

    def __init__(self, solver: Solver = solve) -> None:
        self._solver = solver
        self._task: asyncio.Task[AnalysisResult] | None = None
        self.state = SessionState()

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def submit(
        self,
        image: str,
        mime_type: str,
        language: Language | str,
        config: ProviderConfig,
    ) -> AnalysisResult:
        if self.in_flight:
            logger.info("Cancelling superseded request")
            self._task.cancel()

        task = asyncio.create_task(self._solver(image, mime_type, Language(language), config))
        self._task = task
        self.state = SessionState(status=AppState.ANALYZING)

        try:
            result = await task
        except asyncio.CancelledError:
            if self._task is not task and task.cancelled():
                raise RequestSupersededError("superseded by a newer submission") from None
            if self._task is task:
                self._task = None
                self.state = SessionState()
            raise
        except Exception as exc:
            if self._task is task:
                self.state = SessionState(status=AppState.ERROR, error=exc)
            raise

        if self._task is task:
            self.state = SessionState(status=AppState.SUCCESS, result=result)
        return result

    def reset(self) -> None:
        if self.in_flight:
            self._task.cancel()
        self._task = None
        self.state = SessionState()
