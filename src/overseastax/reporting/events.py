from __future__ import annotations

from typing import List

from .fifo_domain import DataConsistencyWarning


class DiagnosticRecorder:
    """Collect data-consistency warnings without side effects."""

    def __init__(self) -> None:
        self._warnings: List[DataConsistencyWarning] = []

    def record(self, warning: DataConsistencyWarning) -> None:
        self._warnings.append(warning)

    @property
    def warnings(self) -> list[DataConsistencyWarning]:
        return self._warnings
