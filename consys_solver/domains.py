# -*- coding: utf-8 -*-
"""
変数ごとのドメイン（候補値の集合）を表すモジュールです。

- Domain   : 抽象基底クラス。values() と選好度 preference() を持つ
- Constant : 値が 1 つだけのドメイン
- Set      : 値を列挙したドメイン（重複は除去、最初の出現順を保持）
- Range    : start から end まで step 刻みの数値ドメイン

選好度（preference）は 0〜10 の数値で、大きいほど「その値を選びたい」ことを表します。
ユーザーの関数が範囲外の値を返しても、ここで 0〜10 に丸めます。
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Iterable, List, Optional, TypeVar

import numpy as np

from .config import DEFAULT_PREFERENCE, MAX_PREFERENCE
from .errors import InvalidDomainError

T = TypeVar("T")

PreferenceFunction = Callable[[Any], float]


def _default_preference(_value: Any) -> float:
    return DEFAULT_PREFERENCE


class Domain(ABC, Generic[T]):
    """
    1 つの変数が取り得る値の集合を表す抽象クラスです。

    サブクラスは values() を実装します。values() は有限で、
    何度呼んでも同じ結果を返す必要があります（内部状態を消費しない）。
    """

    def __init__(self, preference: Optional[PreferenceFunction] = None):
        self._preference: PreferenceFunction = preference or _default_preference

    @abstractmethod
    def values(self) -> List[T]:
        """ドメインの全ての値を返します。順序に意味はありません。"""

    def preference(self, value: T) -> float:
        """
        value の選好度を 0〜MAX_PREFERENCE に丸めて返します。

        ユーザー関数が NaN を返した場合は 0（最も選ばれにくい）として扱います。
        """
        raw = float(self._preference(value))
        if math.isnan(raw):
            return 0.0
        return max(0.0, min(raw, MAX_PREFERENCE))

    def preferred_values(self) -> List[T]:
        """values() を選好度の高い順に並べ替えて返します（同点は元の順）。"""
        return sorted(self.values(), key=self.preference, reverse=True)


class Constant(Domain[T]):
    """変更できない 1 つの値だけを持つドメイン。"""

    def __init__(self, value: T):
        super().__init__()
        self.value = value

    def values(self) -> List[T]:
        return [self.value]

    def __repr__(self) -> str:
        return f"Constant({self.value!r})"


class Set(Domain[T]):
    """
    値を列挙したドメイン。各値は最大 1 回だけ含まれます。

    重複の判定は == で行うため、リストや dict のような
    ハッシュできない値も扱えます。
    """

    def __init__(self, values: Iterable[T], preference: Optional[PreferenceFunction] = None):
        super().__init__(preference)
        unique: List[T] = []
        for value in values:
            if value not in unique:
                unique.append(value)
        self._values = unique

    def values(self) -> List[T]:
        return list(self._values)

    def __repr__(self) -> str:
        return f"Set({self._values!r})"


class Range(Domain[float]):
    """
    start から end まで step 刻みの数値ドメイン。

    start > end の場合は入れ替え、step は絶対値を使います。
    step が 0 だと値が無限に生成されるため、生成時に InvalidDomainError を送出します。
    """

    def __init__(
        self,
        start: float,
        end: float,
        step: float,
        preference: Optional[PreferenceFunction] = None,
    ):
        super().__init__(preference)
        for name, number in (("start", start), ("end", end), ("step", step)):
            if not math.isfinite(number):
                raise InvalidDomainError(f"Range {name} must be finite, got {number!r}")
        if step == 0:
            raise InvalidDomainError("Range step must not be 0")

        self.start = min(start, end)
        self.end = max(start, end)
        self.step = abs(step)

    def __len__(self) -> int:
        # 要素数は floor((end - start) / step) + 1。割り算の結果に許容誤差は足さない
        return math.floor((self.end - self.start) / self.step) + 1

    def values(self) -> List[float]:
        steps = np.arange(len(self))
        if all(isinstance(n, (int, np.integer)) for n in (self.start, self.end, self.step)):
            return (self.start + self.step * steps).tolist()

        # 浮動小数の誤差で end をわずかに超えた値は end に丸める
        values = np.minimum(self.start + self.step * steps.astype(float), self.end)
        return values.tolist()

    def __repr__(self) -> str:
        return f"Range({self.start!r}, {self.end!r}, {self.step!r})"
