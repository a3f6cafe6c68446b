"""
Main simulation engine orchestrating all components.

This is the core simulator that coordinates:
- Event processing
- Population construction from a model description
- Disease progression and place contagion
- Daily population statistics
- The end of simulated time
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO
import logging
import sys

import pandas as pd
from tqdm import tqdm

from core.context import SimulationContext
from core.events import Event, EventType
from core.models import DAY
from epidemic.handlers import register_handlers
from modelfile.parser import ModelDescription
from population.builder import Population, build_population
from reporting.data_export import StatisticsReporter


class SimulationStatus(Enum):
    """Current simulation status."""
    INITIALIZED = "initialized"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class SimulationConfig:
    """Configuration for simulation run."""

    # Randomness
    random_seed: Optional[int] = 42

    # Disease model
    bedridden_uses_own_recovery: bool = False  # False reuses the symptomatic recovery rule

    # Report
    print_report: bool = True  # CSV lines to stdout unless a stream is given
    headline: bool = True

    # Performance / debugging
    progress_bar: bool = False
    keep_event_history: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    export_log: bool = False  # Enable file logging
    configure_logging: bool = True

    # Output
    output_dir: str = "simulation_results"
    export_csv: bool = False  # Export daily statistics CSV file


@dataclass
class SimulationResults:
    """Results from a simulation run."""

    # Metadata
    config: SimulationConfig = None
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    # Simulation outcome
    population: int = 0
    simulated_days: float = 0.0
    events_processed: int = 0
    final_counts: Dict[str, int] = field(default_factory=dict)
    daily_statistics: Optional[pd.DataFrame] = None

    # Exported files
    exported_files: Dict[str, str] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        """Wall-clock run duration in seconds."""
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    @property
    def ever_infected(self) -> int:
        """People who left the uninfected state."""
        return self.population - self.final_counts.get("uninfected", self.population)

    @property
    def attack_rate(self) -> float:
        if self.population == 0:
            return 0.0
        return self.ever_infected / self.population

    def summary(self) -> str:
        """Generate summary report."""
        counts = "\n".join(f"  {state}: {n:,}" for state, n in self.final_counts.items())
        return f"""
Simulation Results Summary
{'='*50}
Duration: {self.duration_seconds:.1f} seconds
Simulated days: {self.simulated_days:g}
Population: {self.population:,}
Events processed: {self.events_processed:,}
Ever infected: {self.ever_infected:,} ({self.attack_rate:.1%})
Final counts:
{counts}
"""


class Simulator:
    """
    Main epidemic simulator.

    Building a Simulator performs the whole setup at simulated time 0.0:
    the daily report and the end of time are scheduled, then the population
    is built, which infects the initial cases and commits everybody to
    their schedules.  ``run`` then drains the event queue.
    """

    def __init__(
        self,
        config: SimulationConfig,
        model: ModelDescription,
        report_stream: Optional[TextIO] = None
    ):
        """
        Initialize simulator.

        Args:
            config: Simulation configuration
            model: Validated model description
            report_stream: Where daily CSV lines go (default stdout if
                config.print_report)
        """
        self.config = config
        self.model = model
        self.status = SimulationStatus.INITIALIZED
        self.results = SimulationResults(config=config)

        # Logging
        self._setup_logging()

        self.context = SimulationContext.create(
            seed=config.random_seed,
            rules=model.disease_rules(config.bedridden_uses_own_recovery),
            keep_history=config.keep_event_history
        )
        self.event_manager = self.context.events

        if report_stream is None and config.print_report:
            report_stream = sys.stdout
        self.reporter = StatisticsReporter(
            self.context.counters, stream=report_stream, headline=config.headline
        )

        self.population: Optional[Population] = None
        self._pbar = None
        self._initialize_components()

    def _setup_logging(self) -> None:
        """Configure logging."""
        self.logger = logging.getLogger('Simulator')
        if not self.config.configure_logging:
            return

        level = getattr(logging, self.config.log_level.upper())
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers = []

        # console logging goes to stderr so it never mixes with the CSV report
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if self.config.export_log:
            if not self.config.log_file:
                log_dir = Path(self.config.output_dir)
                log_dir.mkdir(parents=True, exist_ok=True)
                timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
                self.config.log_file = str(log_dir / f"simulation_{timestamp}.log")

            file_handler = logging.FileHandler(self.config.log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            self.logger.info(f"Logging to file: {self.config.log_file}")

    def _initialize_components(self) -> None:
        """Initialize all simulation components."""
        self.logger.info("Initializing simulation components...")

        self._register_event_handlers()

        # the report comes first so day-0 statistics precede any movement
        self.reporter.start(self.event_manager)
        self.event_manager.schedule(self.end_of_time, EventType.END_OF_TIME)

        self.population = build_population(
            self.context,
            self.model.roles,
            self.model.place_kinds,
            self.model.population,
            self.model.infected
        )
        self.results.population = self.population.size

        self.logger.info(f"Scheduled {self.event_manager.size()} initial events")

    def _register_event_handlers(self) -> None:
        """Register handlers for different event types."""
        register_handlers(self.event_manager)
        self.event_manager.register_handler(EventType.END_OF_TIME, self._handle_end_of_time)
        self.event_manager.register_handler(EventType.DAILY_REPORT, self._handle_daily_progress)

    @property
    def end_of_time(self) -> float:
        """Simulated time, in seconds, at which the run stops."""
        return self.model.end_days * DAY

    def _handle_end_of_time(self, event: Event) -> None:
        self.logger.info(f"End of time reached at day {event.time / DAY:g}")
        # the report due at this same instant was queued later and would not fire
        rows = self.reporter.rows
        on_day_boundary = event.time % DAY == 0.0
        if on_day_boundary and (not rows or rows[-1]["time"] < event.time / DAY):
            self.reporter.report(event.time)
        self.event_manager.stop()

    def _handle_daily_progress(self, event: Event) -> None:
        counters = self.context.counters
        assert counters.total == self.results.population, "population statistics out of balance"
        if self._pbar is not None and event.time > 0.0:
            self._pbar.update(1)

    def run(self) -> SimulationResults:
        """
        Run the complete simulation.

        Returns:
            SimulationResults with final counts and daily statistics
        """
        self.logger.info("=" * 60)
        self.logger.info("Starting Simulation")
        self.logger.info("=" * 60)
        self.logger.info(f"Period: {self.model.end_days:g} days, seed {self.config.random_seed}")
        self.logger.info(f"Population: {self.results.population}")
        self.logger.info(f"Events Queued: {self.event_manager.size()}")

        self.status = SimulationStatus.RUNNING
        self.results.start_time = datetime.now()

        if self.config.progress_bar:
            self._pbar = tqdm(total=int(self.model.end_days), desc="Simulated days", unit="day")

        try:
            self.event_manager.run()
            self.status = SimulationStatus.COMPLETED

        except Exception as e:
            self.logger.error(f"Simulation error: {e}", exc_info=True)
            self.status = SimulationStatus.ERROR
            raise

        finally:
            if self._pbar is not None:
                self._pbar.close()
                self._pbar = None

            self.results.end_time = datetime.now()
            self.results.simulated_days = self.event_manager.current_time / DAY
            self.results.events_processed = self.event_manager.events_processed
            self.results.final_counts = self.context.counters.snapshot()
            self.results.daily_statistics = self.reporter.to_dataframe()

        self.logger.info("=" * 60)
        self.logger.info("Simulation Complete")
        self.logger.info("=" * 60)
        self.logger.info(self.results.summary())

        if self.config.export_csv:
            path = Path(self.config.output_dir) / "daily_statistics.csv"
            self.results.exported_files["daily_statistics"] = str(self.reporter.export_csv(path))

        return self.results

    def get_statistics(self) -> Dict[str, Any]:
        """Event and population statistics of the run so far."""
        stats = self.event_manager.get_statistics()
        stats['population'] = self.context.counters.snapshot()
        return stats

    @property
    def people(self) -> List:
        return self.population.people if self.population else []
