"""
Population statistics export.

The reporter is a logical process inside the simulation: once started it
fires every simulated day, writes one CSV line giving the time (in days)
and the number of people in each disease state, and keeps the rows for
export as a pandas DataFrame or CSV file afterwards.
"""

import csv
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

import pandas as pd

from core.events import Event, EventManager, EventType
from core.models import DAY, DiseaseState, PopulationCounters

logger = logging.getLogger(__name__)


class StatisticsReporter:
    """
    Daily per-state population report.

    Args:
        counters: The live population table to read
        stream: Where CSV lines go as they are produced (None to only record)
        headline: Whether to write a header line naming the columns
    """

    def __init__(
        self,
        counters: PopulationCounters,
        stream: Optional[TextIO] = None,
        headline: bool = True
    ):
        self.counters = counters
        self.stream = stream
        self.headline = headline
        self.rows: List[Dict[str, Any]] = []
        self._event_manager: Optional[EventManager] = None
        self._writer = csv.writer(stream, lineterminator="\n") if stream is not None else None

    @property
    def columns(self) -> List[str]:
        return ["time"] + [state.label for state in DiseaseState]

    def start(self, event_manager: EventManager, time: float = 0.0) -> None:
        """Register the report handler and schedule the first report."""
        if self.headline and self._writer is not None:
            self._writer.writerow(self.columns)
        self._event_manager = event_manager
        event_manager.register_handler(EventType.DAILY_REPORT, self._handle_report)
        event_manager.schedule(time, EventType.DAILY_REPORT)

    def _handle_report(self, event: Event) -> None:
        self.report(event.time)
        # schedule the next report
        self._event_manager.schedule(event.time + DAY, EventType.DAILY_REPORT)

    def report(self, time: float) -> Dict[str, Any]:
        """Record (and write) the population statistics at the given time."""
        row: Dict[str, Any] = {"time": time / DAY}
        row.update(self.counters.snapshot())
        self.rows.append(row)
        if self._writer is not None:
            self._writer.writerow([f"{row['time']:g}"] + self.counters.as_row())
        logger.debug(f"Day {row['time']:g}: {self.counters.snapshot()}")
        return row

    def to_dataframe(self) -> pd.DataFrame:
        """All recorded rows, one per simulated day."""
        return pd.DataFrame(self.rows, columns=self.columns)

    def export_csv(self, path: Union[str, Path]) -> Path:
        """Write the recorded rows to a CSV file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(path, index=False)
        logger.info(f"Exported {len(self.rows)} daily rows to {path}")
        return path
