# -*- coding: utf-8 -*-
"""
Solver が使う制約評価器のインターフェースと、その簡易実装です。

Solver が評価器に求める操作は 2 つだけです。

- count_inconsistent_constraints(model, state) : 違反している制約の数
- evaluate_statistics(model, state)            : 変数ごとの「違反への関与数」

FunctionConstraintSystem は、Python の関数（述語）を制約として登録するだけの
最小限の評価器です。制約式の言語を持つ本格的な評価器を使う場合は、
同じ 2 つのメソッドを持つクラスを用意すれば Solver にそのまま渡せます。
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Mapping, Optional, Protocol, Sequence, TypeVar

M = TypeVar("M")
S = TypeVar("S")


@dataclass
class StatisticsReport:
    """
    評価器の統計レポート。

    Attributes
    ----------
    inconsistent_influence : dict[str, int]
        変数のパス -> その変数を参照している違反中の制約の数。
    """

    inconsistent_influence: Mapping[str, int] = field(default_factory=dict)


class ConstraintSystem(Protocol[M, S]):
    """Solver が利用する制約評価器。"""

    def count_inconsistent_constraints(self, model: M, state: S) -> int:
        ...

    def evaluate_statistics(self, model: M, state: S) -> StatisticsReport:
        ...


Predicate = Callable[[Any, Any], bool]


@dataclass
class FunctionConstraint:
    """
    1 つの制約。

    Attributes
    ----------
    predicate : callable
        predicate(model, state) が True なら制約を満たしている。
    variables : tuple of str
        述語が参照する変数のパス（違反への関与数の集計に使う）。
    name : str
        ログ・デバッグ用の名前。
    """

    predicate: Predicate
    variables: Sequence[str]
    name: str

    def holds(self, model: Any, state: Any) -> bool:
        return bool(self.predicate(model, state))


class FunctionConstraintSystem(Generic[M, S]):
    """
    Python の関数を制約として登録する評価器。

    使い方:

        system = FunctionConstraintSystem()
        system.add_constraint(lambda m, s: m["age"] < m["maxAge"], ["age", "maxAge"])

    述語の中で送出された例外はそのまま呼び出し側に伝わります。
    """

    def __init__(self) -> None:
        self.constraints: List[FunctionConstraint] = []

    def add_constraint(
        self,
        predicate: Predicate,
        variables: Sequence[str],
        name: Optional[str] = None,
    ) -> FunctionConstraint:
        constraint = FunctionConstraint(
            predicate=predicate,
            variables=tuple(variables),
            name=name or f"constraint_{len(self.constraints)}",
        )
        self.constraints.append(constraint)
        return constraint

    def inconsistent_constraints(self, model: M, state: S) -> List[FunctionConstraint]:
        """違反している制約の一覧。"""
        return [c for c in self.constraints if not c.holds(model, state)]

    def count_inconsistent_constraints(self, model: M, state: S) -> int:
        return len(self.inconsistent_constraints(model, state))

    def evaluate_statistics(self, model: M, state: S) -> StatisticsReport:
        influence: Counter[str] = Counter()
        for constraint in self.inconsistent_constraints(model, state):
            for path in constraint.variables:
                influence[path] += 1
        return StatisticsReport(inconsistent_influence=dict(influence))
