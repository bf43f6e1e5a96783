# -*- coding: utf-8 -*-
"""
consys_solver 全体で共通して使う設定値をまとめたモジュールです。

- モジュール定数 : 探索パラメータのデフォルト値・ヒューリスティックの定数
- SolverConfig   : Solver に渡す設定（pydantic モデル）

SolverConfig は範囲外の値を「エラーにせず、有効範囲に丸める」方針です。
例: randomness_factor=1.7 -> 1.0, max_iterations=-5 -> 0
知らないキーも同様にエラーにせず、警告ログを出して無視します。
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .logging_utils import get_logger

logger = get_logger(__name__)

# ==== 探索ループ関連 =======================================================

# 1 回の solve で回す最大反復回数
DEFAULT_MAX_ITERATIONS: int = 10000

# この反復回数ごとに全変数のカーソルをランダムに振り直す（0 で無効）
DEFAULT_RETRY_ITERATIONS: int = 2000

# 先読みウィンドウ幅が未指定のとき、最大ドメインサイズに掛ける倍率
LOOK_AHEAD_DOMAIN_MULTIPLIER: int = 2

# 進捗ログを出す間隔（反復回数）
PROGRESS_LOG_INTERVAL: int = 1000

# ==== ヒューリスティック関連 ===============================================

# 候補をスコアではなく完全ランダムに選ぶ確率
DEFAULT_RANDOMNESS_FACTOR: float = 0.3

# 選好度がスコアを 1 からどれだけ引き下げられるか
DEFAULT_PREFERENCE_FACTOR: float = 0.1

# 変数選択のラプラス平滑化係数（違反に関与していない変数も選ばれ得る）
LAPLACE_ALPHA: float = 0.1

# ==== ドメイン関連 =========================================================

# 選好度の上限（下限は 0）
MAX_PREFERENCE: float = 10.0

# 選好度関数を指定しなかったときの値
DEFAULT_PREFERENCE: float = 1.0


def _as_number(value: Any) -> Any:
    """数値文字列（"12" など）を数値に直す。直せなければそのまま返す。"""
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def _clamp(value: float, low: float, high: float) -> float:
    """[low, high] に丸める。NaN は low として扱う。"""
    if math.isnan(value):
        return low
    return max(low, min(value, high))


def _camel(name: str) -> str:
    """snake_case のフィールド名を camelCase の別名に直す。"""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class SolverConfig(BaseModel):
    """
    Solver の探索パラメータ。

    フィールド名は snake_case ですが、JSON などから読み込む場合に備えて
    camelCase（maxIterations など）でも受け付けます。

    Attributes
    ----------
    max_iterations : int
        反復回数の上限（0 以上）。
    retry_iterations : int
        全カーソルをランダム化する周期（0 以上、0 で無効）。
    look_ahead_models : int or None
        1 ステップで評価する候補ウィンドウの幅。
        None または負の値なら「最大ドメインサイズ × 2」を solve ごとに導出。
    randomness_factor : float
        ランダムな候補を選ぶ確率（[0, 1]）。
    preference_factor : float
        スコアに占める選好度の重み（[0, 1]）。
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    max_iterations: int = Field(
        default=DEFAULT_MAX_ITERATIONS,
        validation_alias=AliasChoices("max_iterations", "maxIterations"),
    )
    retry_iterations: int = Field(
        default=DEFAULT_RETRY_ITERATIONS,
        validation_alias=AliasChoices("retry_iterations", "retryIterations"),
    )
    look_ahead_models: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("look_ahead_models", "lookAheadModels"),
    )
    randomness_factor: float = Field(
        default=DEFAULT_RANDOMNESS_FACTOR,
        validation_alias=AliasChoices("randomness_factor", "randomnessFactor"),
    )
    preference_factor: float = Field(
        default=DEFAULT_PREFERENCE_FACTOR,
        validation_alias=AliasChoices("preference_factor", "preferenceFactor"),
    )

    @model_validator(mode="before")
    @classmethod
    def _warn_unknown_keys(cls, data: Any) -> Any:
        # 知らないキーは無視し、警告だけ出す
        if isinstance(data, Mapping):
            known = set(cls.model_fields) | {_camel(name) for name in cls.model_fields}
            unknown = sorted(str(key) for key in data if key not in known)
            if unknown:
                logger.warning("[config] Ignoring unknown solver config key(s): %s", unknown)
        return data

    @field_validator("max_iterations", "retry_iterations", mode="before")
    @classmethod
    def _sanitize_count(cls, value: Any, info: ValidationInfo) -> Any:
        default = cls.model_fields[info.field_name].default
        value = _as_number(value)
        if value is None:
            return default
        if isinstance(value, float):
            if not math.isfinite(value):
                return default
            value = int(value)
        if isinstance(value, int):
            return max(0, value)
        # 数値として解釈できない値は pydantic 側の検証に任せる
        return value

    @field_validator("look_ahead_models", mode="before")
    @classmethod
    def _sanitize_look_ahead(cls, value: Any) -> Any:
        value = _as_number(value)
        if value is None:
            return None
        if isinstance(value, float):
            if not math.isfinite(value):
                return None
            value = int(value)
        if isinstance(value, int) and value < 0:
            return None
        return value

    @field_validator("randomness_factor", "preference_factor", mode="before")
    @classmethod
    def _sanitize_factor(cls, value: Any, info: ValidationInfo) -> Any:
        value = _as_number(value)
        if value is None:
            return cls.model_fields[info.field_name].default
        if isinstance(value, (int, float)):
            return _clamp(float(value), 0.0, 1.0)
        return value

    def merged(self, overrides: Union["SolverConfig", Mapping[str, Any], None]) -> "SolverConfig":
        """
        overrides で指定された項目だけを上書きした新しい設定を返します。
        自分自身は変更しません（solve 1 回分だけの上書きに使う）。
        """
        if overrides is None:
            return self
        if not isinstance(overrides, SolverConfig):
            # camelCase のキーもここでフィールド名にそろえる
            overrides = SolverConfig.model_validate(dict(overrides))
        update = overrides.model_dump(exclude_unset=True)
        return SolverConfig(**{**self.model_dump(), **update})

    def resolve_look_ahead(self, max_domain_size: int) -> int:
        """実際に使う先読み幅。未指定なら最大ドメインサイズから導出する。"""
        if self.look_ahead_models is None:
            return LOOK_AHEAD_DOMAIN_MULTIPLIER * max_domain_size
        return self.look_ahead_models


ConfigLike = Union[SolverConfig, Mapping[str, Any], None]
