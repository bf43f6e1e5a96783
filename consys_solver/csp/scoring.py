# scoring.py
# -*- coding: utf-8 -*-
"""
候補モデルのスコアリングを行うモジュール。

スコアの内訳
-----------
1. 制約スコア（log_score）
   - 1 / (1 + 違反制約数)
   - 違反ゼロでちょうど 1、違反が増えるほど 0 に近づく

2. 選好度スコア（preference_score）
   - (1 - preference_factor) + (選好度 / 10) * preference_factor
   - preference_factor が 0.1 なら [0.9, 1.0] の範囲に収まる

3. 最終スコア
   - 上の 2 つの調和平均
   - どちらか一方だけが高い候補（選好度は最高だが違反だらけ、など）は低くなる

注意
----
評価器の返す違反数・関与数は、負の値や非有限値であってはいけません。
そのような値を受け取ったら EvaluatorContractError で即座に失敗させます。
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Dict, Mapping

from ..config import MAX_PREFERENCE
from ..constraints import ConstraintSystem
from ..errors import EvaluatorContractError


def checked_count(value: Any, what: str = "inconsistent constraint count") -> float:
    """
    評価器から受け取った数を検証して返します。

    数値でない・負・非有限（NaN, inf）なら EvaluatorContractError。
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise EvaluatorContractError(f"{what} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise EvaluatorContractError(f"{what} must be a finite non-negative number, got {value!r}")
    return value


def count_inconsistent(system: ConstraintSystem, model: Any, state: Any) -> float:
    return checked_count(system.count_inconsistent_constraints(model, state))


def inconsistent_influence(system: ConstraintSystem, model: Any, state: Any) -> Dict[str, float]:
    """評価器の統計レポートから、変数ごとの違反への関与数を取り出して検証します。"""
    report = system.evaluate_statistics(model, state)
    influence: Mapping[str, Any] = report.inconsistent_influence or {}
    return {
        path: checked_count(count, what=f"inconsistent influence of '{path}'")
        for path, count in influence.items()
    }


def is_feasible(system: ConstraintSystem, model: Any, state: Any) -> bool:
    """違反している制約が 1 つも無ければ True。"""
    return count_inconsistent(system, model, state) == 0


def log_score(inconsistent_count: float) -> float:
    """違反数を (0, 1] のスコアに変換します。"""
    return 1.0 / (1.0 + inconsistent_count)


def preference_score(preference: float, preference_factor: float) -> float:
    """選好度（0〜10）を [1 - preference_factor, 1] のスコアに変換します。"""
    return (1.0 - preference_factor) + (preference / MAX_PREFERENCE) * preference_factor


def harmonic_mean(a: float, b: float) -> float:
    if a + b == 0:
        return 0.0
    return 2.0 * a * b / (a + b)


def candidate_score(
    system: ConstraintSystem,
    model: Any,
    state: Any,
    preference: float,
    preference_factor: float,
) -> float:
    """候補モデル 1 つの最終スコア（大きいほど良い）。"""
    return harmonic_mean(
        log_score(count_inconsistent(system, model, state)),
        preference_score(preference, preference_factor),
    )
