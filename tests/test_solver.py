"""End-to-end tests for Solver.solve / Solver.find.

These tests verify that the solver:
- Finds a model satisfying all constraints of the person scenario
- Never returns the same model twice
- Always stops within max_iterations, even when no move is possible
- Exhausts the budget when fewer feasible models exist than requested
- Is reproducible with a seeded random source
- Starts from the most preferred values
- Applies per-call config without changing the instance config
- Fails fast when the evaluator breaks its contract
"""

import random
from dataclasses import dataclass

import numpy as np
import pytest

from consys_solver import (
    Constant,
    EvaluatorContractError,
    FunctionConstraintSystem,
    Range,
    Set,
    Solver,
    get_value,
)

from .conftest import CountingSystem


def _pair_system():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: m["x"] + m["y"] == 20, ["x", "y"])
    system.add_constraint(lambda m, s: m["x"] < m["y"], ["x", "y"])
    return system


def _pair_domain():
    return {"x": Range(0, 20, 1), "y": Range(0, 20, 1)}


def test_person_scenario_finds_feasible_model(person_system, person_domain):
    solver = Solver(person_system, {"max_iterations": 10000}, rng=random.Random(7))

    result = solver.solve(1, person_domain)

    assert len(result.solutions) == 1
    model = result.solutions[0]
    assert model["name"] == "Nils"
    assert model["age"] > 0
    assert model["age"] % 5 == 0
    assert model["age"] < model["maxAge"]
    assert model["absoluteMaxAge"] == model["age"] + model["maxAge"]
    assert result.iterations <= 10000


def test_solutions_are_never_duplicated():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: m["x"] % 3 == 0, ["x"])
    solver = Solver(system, rng=random.Random(11))

    result = solver.solve(5, {"x": Range(0, 9, 1), "y": Set(["a", "b"])}, config={"max_iterations": 3000})

    assert len(result.solutions) == 5
    for i, first in enumerate(result.assignments):
        assert first["x"] % 3 == 0
        for second in result.assignments[i + 1:]:
            assert first != second


def test_single_feasible_point_exhausts_budget():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: m["x"] == 7, ["x"])
    solver = Solver(system, {"max_iterations": 300}, rng=random.Random(3))

    result = solver.solve(3, {"x": Range(0, 10, 1)})

    assert result.solutions == [{"x": 7}]
    assert result.iterations == 300


@pytest.mark.parametrize("max_iterations", [0, 1, 50])
def test_terminates_within_max_iterations(max_iterations):
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: False, ["x"])
    solver = Solver(system, rng=random.Random(0))

    result = solver.solve(1, {"x": Range(0, 100, 1)}, config={"max_iterations": max_iterations})

    assert result.iterations == max_iterations
    assert result.solutions == []
    assert not result.found


def test_empty_candidate_window_runs_the_full_budget():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: m["x"] == 5, ["x"])
    config = {"max_iterations": 120, "look_ahead_models": 0, "retry_iterations": 0}
    solver = Solver(system, config, rng=random.Random(0))

    result = solver.solve(1, {"x": Range(0, 10, 1)})

    assert result.iterations == 120
    assert result.solutions == []
    assert result.restarts == 0


def test_periodic_restarts():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: False, ["x"])
    solver = Solver(system, {"max_iterations": 250, "retry_iterations": 100}, rng=random.Random(0))

    assert solver.solve(1, {"x": Range(0, 100, 1)}).restarts == 2
    assert solver.solve(1, {"x": Range(0, 100, 1)}, config={"retry_iterations": 0}).restarts == 0


def test_seeded_runs_are_reproducible():
    config = {"max_iterations": 2000, "randomness_factor": 0}

    first = Solver(_pair_system(), config, rng=random.Random(123)).solve(3, _pair_domain())
    second = Solver(_pair_system(), config, rng=random.Random(123)).solve(3, _pair_domain())

    assert first.assignments == second.assignments
    assert first.iterations == second.iterations


def test_numpy_generator_can_drive_the_search():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: m["x"] == 7, ["x"])
    solver = Solver(system, {"max_iterations": 200}, rng=np.random.default_rng(0))

    assert solver.find(1, {"x": Range(0, 10, 1)}) == [{"x": 7}]


def test_first_solution_is_most_preferred():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: m["x"] >= 0, ["x"])
    solver = Solver(system, rng=random.Random(0))

    result = solver.solve(1, {"x": Range(0, 10, 1, lambda v: v), "tag": Set(["b", "a"], lambda v: 9 if v == "a" else 2)})

    assert result.assignments == [{"x": 10, "tag": "a"}]
    assert result.iterations == 1


def test_nested_model_domain(nested_domain):
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: get_value(m, "nested.number") == 4, ["nested.number"])
    system.add_constraint(lambda m, s: m["name"].startswith("S"), ["name"])
    solver = Solver(system, {"max_iterations": 2000}, rng=random.Random(1))

    solutions = solver.find(1, nested_domain)

    assert solutions == [{"name": "Steffen", "nested": {"number": 4}, "details": {"phone": 40343}}]


def test_state_is_passed_to_the_evaluator():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: m["x"] == s["target"], ["x"])
    solver = Solver(system, {"max_iterations": 500}, rng=random.Random(4))

    assert solver.find(1, {"x": Range(0, 10, 1)}, {"target": 6}) == [{"x": 6}]
    assert solver.find(1, {"x": Range(0, 10, 1)}, {"target": 2}) == [{"x": 2}]


def test_custom_model_factory():
    @dataclass
    class Person:
        name: str
        age: float

    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: m.name == "Nils", ["name"])
    system.add_constraint(lambda m, s: m.age == 30, ["age"])
    solver = Solver(system, {"max_iterations": 2000}, rng=random.Random(2), model_factory=lambda a: Person(**a))

    result = solver.solve(1, {"name": Set(["Pete", "Nils"]), "age": Range(0, 50, 5)})

    assert result.solutions == [Person(name="Nils", age=30)]
    assert result.assignments == [{"name": "Nils", "age": 30}]


def test_per_call_config_does_not_persist():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: False, ["x"])
    solver = Solver(system, {"max_iterations": 40}, rng=random.Random(0))

    assert solver.solve(1, {"x": Range(0, 9, 1)}, config={"max_iterations": 5}).iterations == 5
    assert solver.config.max_iterations == 40
    assert solver.solve(1, {"x": Range(0, 9, 1)}).iterations == 40


def test_max_solutions_is_coerced_to_at_least_one():
    system = FunctionConstraintSystem()
    solver = Solver(system, rng=random.Random(0))

    result = solver.solve(0, {"x": Constant(1)})

    assert result.solutions == [{"x": 1}]
    assert result.iterations == 1


def test_negative_count_from_evaluator_fails_fast():
    solver = Solver(CountingSystem(count=-1), rng=random.Random(0))

    with pytest.raises(EvaluatorContractError):
        solver.solve(1, {"x": Range(0, 3, 1)})


def test_result_to_frame():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: m["x"] % 2 == 0, ["x"])
    solver = Solver(system, {"max_iterations": 1000}, rng=random.Random(9))

    result = solver.solve(2, {"x": Range(0, 5, 1), "y": Constant("k")})
    frame = result.to_frame()

    assert list(frame.columns) == ["x", "y"]
    assert len(frame) == len(result.solutions) == 2
    assert (frame["x"] % 2 == 0).all()
    assert (frame["y"] == "k").all()


def test_empty_result_frame_keeps_columns():
    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: False, ["x"])
    solver = Solver(system, {"max_iterations": 3}, rng=random.Random(0))

    frame = solver.solve(1, {"x": Range(0, 5, 1)}).to_frame()

    assert list(frame.columns) == ["x"]
    assert frame.empty
