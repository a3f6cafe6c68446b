"""
Reader for model descriptions.

A model description is a sequence of items, each beginning with a keyword
and ending with a semicolon::

    population 1000;
    infected 5;
    latent 3 1;
    asymptomatic 2 1 0.5;
    symptomatic 5 2 0.8;
    bedridden 7 3 0.7;
    end 90;
    place home 3 2 0.02;
    place work 10 20 0.01;
    role worker 0.6 home work (8-17 0.9);
    role homebody 0.4 home;

Disease stages give median days, scatter days and an optional recovery
probability; places give median size, scatter and infections per hour.
Places must be defined before the roles that mention them.  A role lists
one home (a place with no schedule) and any number of other places, each
followed by a schedule ``(start-end likelihood)`` in hours, likelihood
defaulting to 1.0.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging

from core.models import DiseaseRules, InfectionRule
from epidemic.schedule import Schedule
from modelfile.errors import ErrorReporter, ModelDescriptionError
from modelfile.scanner import ModelScanner, BEGIN_PAREN, END_PAREN, DASH, SEMICOLON
from population.roles import PlaceKind, Role

logger = logging.getLogger(__name__)

RULE_KEYWORDS = ("latent", "asymptomatic", "symptomatic", "bedridden")


@dataclass
class ModelDescription:
    """Everything a model description specifies."""

    population: int = 0
    infected: int = 0
    end_days: float = 0.0
    infection_rules: Dict[str, InfectionRule] = field(default_factory=dict)
    place_kinds: List[PlaceKind] = field(default_factory=list)
    roles: List[Role] = field(default_factory=list)

    def disease_rules(self, bedridden_uses_own_recovery: bool = False) -> DiseaseRules:
        return DiseaseRules(
            latent=self.infection_rules["latent"],
            asymptomatic=self.infection_rules["asymptomatic"],
            symptomatic=self.infection_rules["symptomatic"],
            bedridden=self.infection_rules["bedridden"],
            bedridden_uses_own_recovery=bedridden_uses_own_recovery
        )

    def find_place_kind(self, name: str) -> Optional[PlaceKind]:
        for kind in self.place_kinds:
            if kind.name == name:
                return kind
        return None

    def find_role(self, name: str) -> Optional[Role]:
        for role in self.roles:
            if role.name == name:
                return role
        return None


class ModelParser:
    """
    Keyword-driven parser producing a ModelDescription.

    All problems are reported as warnings through the ErrorReporter; if any
    were reported, ``parse`` raises ModelDescriptionError at the end.
    """

    def __init__(self, text: str, source: str = "<string>"):
        self.errors = ErrorReporter(source)
        self.scanner = ModelScanner(text, self.errors)
        self.model = ModelDescription()

    def parse(self) -> ModelDescription:
        sc = self.scanner
        model = self.model

        while sc.has_next():
            keyword = sc.get_next_name("", "keyword expected")
            if keyword == "population":
                value = self._positive_int_semicolon("population")
                if model.population:
                    sc.warn("population specified more than once")
                else:
                    model.population = value
            elif keyword == "infected":
                value = self._positive_int_semicolon("infected")
                if model.infected:
                    sc.warn("infected specified more than once")
                else:
                    model.infected = value
            elif keyword in RULE_KEYWORDS:
                if keyword in model.infection_rules:
                    sc.warn(f"{keyword} time specified more than once")
                model.infection_rules[keyword] = self._parse_rule(keyword)
            elif keyword == "end":
                self._parse_end()
            elif keyword == "role":
                self._parse_role()
            elif keyword == "place":
                self._parse_place()
            elif keyword:
                sc.warn(f"not a keyword: {keyword}")

        self._check_complete()
        self.errors.raise_if_warnings("Aborted due to errors in input")
        logger.info(f"Read model {self.errors.source}: population {model.population}, "
                    f"{len(model.place_kinds)} place kinds, {len(model.roles)} roles")
        return model

    # items

    def _positive_int_semicolon(self, keyword: str) -> int:
        sc = self.scanner
        value = sc.get_next_int(1, f"{keyword}: missing integer")
        sc.get_next_literal(SEMICOLON, f"{keyword} {value}: missing ;")
        if value <= 0:
            sc.warn(f"{keyword} {value}: not positive")
            return 1
        return value

    def _parse_rule(self, keyword: str) -> InfectionRule:
        sc = self.scanner
        median = sc.get_next_float(1.0, f"{keyword}: median expected")
        scatter = sc.get_next_float(0.0, f"{keyword} {median:g}: scatter expected")
        recovery = 0.0
        if not sc.try_next_literal(SEMICOLON):
            recovery = sc.get_next_float(
                0.0, f"{keyword} {median:g} {scatter:g}: recovery probability expected"
            )
            sc.get_next_literal(SEMICOLON, f"{keyword} {median:g} {scatter:g} {recovery:g}: semicolon expected")

        described = f"{keyword} {median:g} {scatter:g} {recovery:g}"
        if median <= 0.0:
            sc.warn(f"{described}: non-positive median?")
            median = 1.0
        if scatter < 0.0:
            sc.warn(f"{described}: negative scatter?")
            scatter = 0.0
        if recovery < 0.0:
            sc.warn(f"{described}: negative recovery probability?")
            recovery = 0.0
        if recovery > 1.0:
            sc.warn(f"{described}: recovery probability greater than one?")
        return InfectionRule.from_description(median, scatter, recovery)

    def _parse_end(self) -> None:
        sc = self.scanner
        end = sc.get_next_float(1.0, "end: end time missing")
        sc.get_next_literal(SEMICOLON, f"end {end:g}: missing ;")
        if end <= 0.0:
            sc.warn(f"end {end:g}: non-positive end time?")
            return
        if self.model.end_days > 0.0:
            sc.warn(f"end {end:g}: duplicate end time")
        else:
            self.model.end_days = end

    def _parse_place(self) -> None:
        sc = self.scanner
        name = sc.get_next_name("???", "place with no name")
        median = sc.get_next_float(9.9999, f"place {name}: not followed by median")
        scatter = sc.get_next_float(9.9999, f"place {name} {median:g}: not followed by scatter")
        transmissivity = sc.get_next_float(
            9.9999, f"place {name} {median:g} {scatter:g}: not followed by transmissivity"
        )
        described = f"place {name} {median:g} {scatter:g} {transmissivity:g}"
        sc.get_next_literal(SEMICOLON, f"{described}: missing semicolon")

        if self.model.find_place_kind(name) is not None:
            sc.warn(f"{described}: duplicate name")
        if median <= 0.0:
            sc.warn(f"{described}: non-positive median?")
            median = 1.0
        if scatter < 0.0:
            sc.warn(f"{described}: negative scatter?")
            scatter = 0.0
        if transmissivity < 0.0:
            sc.warn(f"{described}: negative transmissivity?")
            transmissivity = 0.0
        self.model.place_kinds.append(PlaceKind(name, median, scatter, transmissivity))

    def _parse_role(self) -> None:
        sc = self.scanner
        name = sc.get_next_name("???", "role with no name")
        fraction = sc.get_next_float(9.9999, f"role {name}: not followed by population")
        role = Role(name, fraction)

        has_next = sc.has_next()
        while has_next and not sc.try_next_literal(SEMICOLON):
            place_name = sc.get_next_name("???", f"{role.describe()}: place name expected")
            kind = self.model.find_place_kind(place_name)
            schedule = None
            if sc.try_next_literal(BEGIN_PAREN):
                schedule = self._parse_schedule(f"{role.describe()} {place_name}")

            if kind is None:
                sc.warn(f"{role.describe()} {place_name}: undefined place?")
            else:
                reason = role.conflict_with(kind, schedule)
                if reason is not None:
                    sc.warn(f"{role.describe()} {place_name}: {reason}")
                else:
                    role.place_kinds.append((kind, schedule))
            has_next = sc.has_next()
        if not has_next:
            sc.warn(f"{role.describe()}: missing semicolon?")

        if self.model.find_role(name) is not None:
            sc.warn(f"{role.describe()}: role name reused?")
        if fraction <= 0.0:
            sc.warn(f"{role.describe()}: non-positive population?")
            role.fraction = 0.0
        if role.home_kind is None:
            sc.warn(f"{role.describe()}: no home specified?")
        self.model.roles.append(role)

    def _parse_schedule(self, context: str) -> Schedule:
        """Parse ``start-end [likelihood])``, the begin paren already scanned."""
        sc = self.scanner
        start = sc.get_next_float(23.98, f"{context}(: not followed by start time")
        sc.get_next_literal(DASH, f"{context}({start:g}: not followed by -")
        end = sc.get_next_float(23.99, f"{context}({start:g}-: not followed by end time")

        likelihood = 1.0
        if not sc.try_next_literal(END_PAREN):
            likelihood = sc.get_next_float(0.0, f"{context}({start:g}-{end:g}: not followed by likelihood")
            sc.get_next_literal(END_PAREN, f"{context}({start:g}-{end:g} {likelihood:g}: not followed by )")

        described = f"{context}({start:g}-{end:g} {likelihood:g})"
        if start >= 24.0:
            sc.warn(f"{described}: start time is tomorrow")
        if start < 0.0:
            sc.warn(f"{described}: start time is yesterday")
            start = 0.0
        if start >= end:
            sc.warn(f"{described}: times out of order")
        if end > 24.0:
            sc.warn(f"{described}: end time is tomorrow")
        if likelihood < 0.0:
            sc.warn(f"{described}: likelihood cannot be negative")
            likelihood = 0.0
        if likelihood > 1.0:
            sc.warn(f"{described}: likelihood cannot be over 1.0")
        return Schedule.from_hours(start, end, likelihood)

    def _check_complete(self) -> None:
        model = self.model
        errors = self.errors
        if not model.population:
            errors.warn("population not given")
        for keyword in RULE_KEYWORDS:
            if keyword not in model.infection_rules:
                errors.warn(f"{keyword} time not given")
        if model.end_days <= 0.0:
            errors.warn("end of time not given")
        if not model.roles:
            errors.warn("no roles specified")
        if model.infected > model.population:
            errors.warn(f"infected {model.infected} exceeds population {model.population}")


def parse_model(text: str, source: str = "<string>") -> ModelDescription:
    """Parse a model description held in a string."""
    return ModelParser(text, source).parse()


def load_model(path: Union[str, Path]) -> ModelDescription:
    """
    Read a model description file.

    Raises:
        FileNotFoundError: If the file cannot be opened
        ModelDescriptionError: If the description has errors
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    return ModelParser(text, str(path)).parse()
