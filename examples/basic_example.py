"""
Example: Small community epidemic built in code.

This demonstrates:
- Defining place kinds and roles directly, without a model file
- Setting disease rules
- Running the simulation
- Analyzing the daily statistics with pandas
"""

import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

from core.models import InfectionRule
from core.simulator import Simulator, SimulationConfig
from epidemic.schedule import Schedule
from modelfile.parser import ModelDescription
from population.roles import PlaceKind, Role


def create_model() -> ModelDescription:
    """Create a town of households, offices and one kind of school."""
    home = PlaceKind("home", median=3, scatter=2, transmissivity_per_hour=0.05)
    office = PlaceKind("office", median=15, scatter=10, transmissivity_per_hour=0.01)
    school = PlaceKind("school", median=30, scatter=10, transmissivity_per_hour=0.02)

    worker = Role("worker", 0.6)
    worker.add_place_kind(home)
    worker.add_place_kind(office, Schedule.from_hours(9, 17, likelihood=0.9))

    pupil = Role("pupil", 0.4)
    pupil.add_place_kind(home)
    pupil.add_place_kind(school, Schedule.from_hours(8, 15, likelihood=0.95))

    return ModelDescription(
        population=1000,
        infected=3,
        end_days=60,
        infection_rules={
            "latent": InfectionRule.from_description(3, 1),
            "asymptomatic": InfectionRule.from_description(2, 1, 0.3),
            "symptomatic": InfectionRule.from_description(5, 2, 0.8),
            "bedridden": InfectionRule.from_description(7, 3, 0.6),
        },
        place_kinds=[home, office, school],
        roles=[worker, pupil]
    )


def main():
    print("=" * 70)
    print("Community Epidemic Example")
    print("=" * 70)

    config = SimulationConfig(random_seed=7, print_report=False, progress_bar=True)
    simulator = Simulator(config, create_model())
    results = simulator.run()

    print(results.summary())

    daily = results.daily_statistics
    contagious = daily["asymptomatic"] + daily["symptomatic"] + daily["bedridden"]
    peak_day = daily.loc[contagious.idxmax(), "time"]
    print(f"Peak contagious: {contagious.max()} people on day {peak_day:g}")
    print(f"Deaths: {daily['dead'].iloc[-1]}")

    return results


if __name__ == "__main__":
    results = main()
