# consys_solver/__init__.py
# -*- coding: utf-8 -*-
"""
consys_solver パッケージの入口となるモジュールです。

    from consys_solver import Solver, Range, Set, Constant, FunctionConstraintSystem

    system = FunctionConstraintSystem()
    system.add_constraint(lambda m, s: m["age"] % 5 == 0 and m["age"] != 0, ["age"])
    system.add_constraint(lambda m, s: m["name"].startswith("N"), ["name"])

    solver = Solver(system, {"max_iterations": 5000})
    solutions = solver.find(1, {
        "age": Range(0, 100, 0.5),
        "name": Set(["Pete", "Nils"]),
    })

と呼び出されることを想定しています。

制約の評価そのものは外部の評価器（ConstraintSystem）に任せ、
ここでは「どの変数をどの値に動かすか」の探索だけを行います。
"""

from .config import SolverConfig
from .constraints import ConstraintSystem, FunctionConstraint, FunctionConstraintSystem, StatisticsReport
from .csp.model_domain import build_model, flatten_model_domain, get_value, insert_value
from .csp.search import Solver
from .domains import Constant, Domain, Range, Set
from .errors import EvaluatorContractError, InvalidDomainError, SolverError
from .types import SolveResult

__all__ = [
    # 探索
    "Solver",
    "SolverConfig",
    "SolveResult",
    # ドメイン
    "Domain",
    "Constant",
    "Set",
    "Range",
    "flatten_model_domain",
    "build_model",
    "insert_value",
    "get_value",
    # 評価器
    "ConstraintSystem",
    "StatisticsReport",
    "FunctionConstraint",
    "FunctionConstraintSystem",
    # 例外
    "SolverError",
    "InvalidDomainError",
    "EvaluatorContractError",
]
