"""Overwrite confirmation for occupied day slots."""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Union

from voca.ingestion.pipeline.ingestion_models import ConflictReport

logger = logging.getLogger(__name__)


# Receives the conflict description, answers yes/no (sync or async)
OverwriteConfirmer = Callable[[str], Union[bool, Awaitable[bool]]]


def conflict_description(day: int, report: ConflictReport) -> str:
    return f"Day {day} already has data in {report.description}. Do you want to overwrite it?"


class OverwriteGate:
    """Asks an external collaborator whether to replace existing data.

    No confirmer means decline. A confirmer that raises is treated as a
    decline.
    """

    __slots__ = ("_confirmer",)

    def __init__(self, confirmer: OverwriteConfirmer | None = None):
        self._confirmer = confirmer

    async def confirm(
        self,
        day: int,
        report: ConflictReport,
        confirmer: OverwriteConfirmer | None = None,
    ) -> bool:
        """Decide whether an occupied slot may be overwritten.

        Args:
            day: Day number.
            report: Conflict report for the slot.
            confirmer: Per-call confirmer, overriding the default one.

        Returns:
            True to proceed with clearing the slot.
        """
        if not report.has_conflict:
            return True

        ask = confirmer or self._confirmer
        if ask is None:
            logger.info(f"OverwriteGate: Day {day} has data and no confirmer is set, declining")
            return False

        description = conflict_description(day, report)
        try:
            answer = ask(description)
            if inspect.isawaitable(answer):
                answer = await answer
        except Exception as e:
            logger.error(f"OverwriteGate: confirmer failed for Day {day}, declining: {e}")
            return False

        return bool(answer)
