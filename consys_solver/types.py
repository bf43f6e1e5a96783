# -*- coding: utf-8 -*-
"""
consys_solver で使う主なデータ構造（型）をまとめたモジュールです。

dataclass を使うことで、
「この構造体はどんなフィールドを持っているのか」を
分かりやすく表現しています。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Protocol, TypeVar

import pandas as pd

M = TypeVar("M")

# 変数のパス（例: "details.phone"）-> 値
Assignment = Dict[str, Any]


class RandomSource(Protocol):
    """
    探索で使う乱数源。

    random() が [0, 1) の一様乱数を返すものなら何でもよく、
    random.Random や numpy.random.Generator をそのまま渡せます。
    """

    def random(self) -> float:
        ...


@dataclass
class DomainCursor:
    """
    1 変数分の探索状態を表すクラスです。

    Attributes
    ----------
    index : int
        現在選んでいる値の位置（values のインデックス）。探索中に変化するのはここだけ。
    values : list
        ドメインから取り出した値のリスト（既定では選好度の高い順）。
    preferences : list of float
        values と同じ並びの選好度（0〜10 に丸め済み）。
    preferred_index : int
        選好度が最大の値の位置（同点なら先に出てきたもの）。
    """

    index: int
    values: List[Any]
    preferences: List[float]
    preferred_index: int = 0

    @property
    def value(self) -> Any:
        """現在選んでいる値。"""
        return self.values[self.index]

    @property
    def size(self) -> int:
        return len(self.values)


@dataclass
class Candidate(Generic[M]):
    """
    1 ステップの探索で評価する「1 変数だけ値を変えたモデル」。

    Attributes
    ----------
    key : str
        値を変えた変数のパス。
    index : int
        key の DomainCursor.values における新しい値の位置。
    value : Any
        新しい値。
    preference : float
        新しい値の選好度。
    assignment : dict[str, Any]
        候補全体の割り当て（パス -> 値）。
    model : M
        assignment から組み立てたモデル（評価器に渡すもの）。
    """

    key: str
    index: int
    value: Any
    preference: float
    assignment: Assignment
    model: M


@dataclass
class SolveResult(Generic[M]):
    """
    solve() の結果。

    Attributes
    ----------
    iterations : int
        実際に回した反復回数。
    solutions : list
        見つかった実行可能モデル（重複なし、見つかった順）。
    assignments : list of dict
        solutions と同じ並びの割り当て（パス -> 値）。
    paths : list of str
        探索した変数のパス一覧。
    restarts : int
        周期的なランダム化を行った回数。
    elapsed_sec : float
        探索にかかった時間（秒）。
    """

    iterations: int = 0
    solutions: List[M] = field(default_factory=list)
    assignments: List[Assignment] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)
    restarts: int = 0
    elapsed_sec: float = 0.0

    @property
    def found(self) -> bool:
        """解が 1 つ以上見つかったかどうか。"""
        return len(self.solutions) > 0

    def to_frame(self) -> pd.DataFrame:
        """
        見つかった解を 1 行 1 解の DataFrame に変換します。
        列は変数のパスです（解が無い場合も列だけは揃えます）。
        """
        return pd.DataFrame(self.assignments, columns=self.paths)
