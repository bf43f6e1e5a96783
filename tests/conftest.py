"""Shared fixtures and helpers for the solver tests."""

from typing import Iterable, List

import pytest

from consys_solver import Constant, FunctionConstraintSystem, Range, Set, StatisticsReport


class SequenceRandom:
    """Random source that replays a fixed list of floats (cycling)."""

    def __init__(self, values: Iterable[float]):
        self.values: List[float] = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


class CountingSystem:
    """Evaluator returning fixed answers, used to check contract handling."""

    def __init__(self, count=0, influence=None):
        self.count = count
        self.influence = influence or {}

    def count_inconsistent_constraints(self, model, state):
        return self.count

    def evaluate_statistics(self, model, state):
        return StatisticsReport(inconsistent_influence=self.influence)


def make_person_system() -> FunctionConstraintSystem:
    system = FunctionConstraintSystem()
    system.add_constraint(
        lambda m, s: m["age"] % 5 == 0 and m["age"] != 0, ["age"], name="age_multiple_of_5"
    )
    system.add_constraint(lambda m, s: m["age"] < m["maxAge"], ["age", "maxAge"], name="age_lt_max")
    system.add_constraint(
        lambda m, s: m["age"] + m["maxAge"] == m["absoluteMaxAge"],
        ["age", "maxAge", "absoluteMaxAge"],
        name="absolute_sum",
    )
    system.add_constraint(lambda m, s: m["name"].startswith("N"), ["name"], name="name_starts_with_n")
    return system


def make_person_domain():
    return {
        "age": Range(0, 100, 0.5),
        "maxAge": Range(0, 100, 0.5),
        "absoluteMaxAge": Range(0, 100, 0.5),
        "name": Set(["Pete", "Nils"]),
    }


@pytest.fixture
def person_system() -> FunctionConstraintSystem:
    return make_person_system()


@pytest.fixture
def person_domain():
    return make_person_domain()


@pytest.fixture
def nested_domain():
    return {
        "name": Set(["Pete", "Nils", "Steffen", "Johann"]),
        "nested": {"number": Range(0, 10, 1)},
        "details": {"phone": Constant(40343)},
    }
