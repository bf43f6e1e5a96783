# -*- coding: utf-8 -*-
"""
min-conflicts 型の局所探索で、制約を全て満たすモデルを探すモジュールです。

ざっくり流れ
------------
1. モデルドメインから探索状態（変数ごとのカーソル）を作り、
   全カーソルを最も好ましい値に合わせる
2. ループのたびに、現在のカーソルからモデルを組み立てて評価器に渡す
3. 違反ゼロなら解として記録し、全カーソルを最も好ましい値に戻して別の解を探す
4. 違反があれば、違反への関与数で重み付けして変数を 1 つ選び、
   その変数の現在値の周り（先読みウィンドウ）の値を候補として評価し、
   最もスコアの高い候補（一定確率でランダムな候補）に移る
5. retry_iterations 回ごとに全カーソルをランダムに振り直す（行き詰まり対策）
6. max_iterations 回回すか、max_solutions 個の解が見つかったら終了

乱数は全て Solver に渡した乱数源から取るので、
シードを固定すれば同じ結果が再現できます。
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Mapping, MutableSequence, Optional, TypeVar

from ..config import LAPLACE_ALPHA, PROGRESS_LOG_INTERVAL, ConfigLike, SolverConfig
from ..constraints import ConstraintSystem
from ..logging_utils import get_logger
from ..types import Assignment, Candidate, RandomSource, SolveResult
from .model_domain import (
    SearchState,
    build_model,
    build_search_state,
    current_assignment,
    max_domain_size,
    randomize,
    reset_to_preferred,
)
from .scoring import candidate_score, inconsistent_influence, is_feasible

logger = get_logger(__name__)

M = TypeVar("M")
S = TypeVar("S")
T = TypeVar("T")

ModelFactory = Callable[[Assignment], Any]


@dataclass
class SearchContext:
    """
    solve 1 回分の探索で共有する情報をまとめたクラスです。
    solve のたびに新しく作るので、同じ Solver を並行して使っても状態は混ざりません。
    """

    system: ConstraintSystem
    state: Any
    config: SolverConfig
    rng: RandomSource
    model_factory: ModelFactory
    domains: SearchState
    look_ahead: int

    solutions: List[Any] = field(default_factory=list)
    solution_assignments: List[Assignment] = field(default_factory=list)

    def is_known_solution(self, assignment: Assignment) -> bool:
        return assignment in self.solution_assignments


def choose_random(values: List[T], rng: RandomSource) -> T:
    """values から一様ランダムに 1 つ選びます。"""
    return values[min(int(rng.random() * len(values)), len(values) - 1)]


def shuffle(items: MutableSequence[Any], rng: RandomSource) -> None:
    """Fisher-Yates でその場でシャッフルします。"""
    for i in range(len(items) - 1, 0, -1):
        j = min(int(rng.random() * (i + 1)), i)
        items[i], items[j] = items[j], items[i]


def choose_key(
    key_counts: Mapping[str, float],
    rng: RandomSource,
    alpha: float = LAPLACE_ALPHA,
) -> Optional[str]:
    """
    違反への関与数を重みとして、変数を 1 つ確率的に選びます。

    ラプラス平滑化（各重みに alpha を足す）により、
    関与数 0 の変数も小さな確率で選ばれます。
    同じ重みの変数の間で並び順による偏りが出ないよう、先にシャッフルします。
    """
    keys = list(key_counts.keys())
    if not keys:
        return None
    shuffle(keys, rng)

    total = sum(key_counts.values()) + alpha * len(keys)
    target = rng.random() * total
    running = 0.0
    for key in keys:
        running += key_counts[key] + alpha
        if target < running:
            return key
    # 浮動小数の丸めで最後まで届かなかった場合
    return keys[-1]


def candidate_window(index: int, size: int, look_ahead: int) -> range:
    """
    現在位置 index を中心とした候補の位置 [index - w/2, index + w/2) を
    [0, size) に収めて返します。
    """
    half = look_ahead // 2
    return range(max(0, index - half), min(size, index + half))


def next_candidates(ctx: SearchContext, assignment: Assignment, key: str) -> List[Candidate]:
    """
    key の値だけをウィンドウ内の各値に置き換えた候補モデルを作ります。
    既に記録した解と同じになる候補は除外します。
    """
    cursor = ctx.domains[key]
    res: List[Candidate] = []
    for index in candidate_window(cursor.index, cursor.size, ctx.look_ahead):
        value = cursor.values[index]
        next_assignment = dict(assignment)
        next_assignment[key] = value
        if ctx.is_known_solution(next_assignment):
            continue
        res.append(
            Candidate(
                key=key,
                index=index,
                value=value,
                preference=cursor.preferences[index],
                assignment=next_assignment,
                model=ctx.model_factory(next_assignment),
            )
        )
    return res


def min_conflicts(
    candidates: List[Candidate],
    score: Callable[[Candidate], float],
    rng: RandomSource,
    randomness_factor: float,
) -> Optional[Candidate]:
    """
    候補の中から次に移るモデルを選びます。

    - 候補が無ければ None（このステップでは動けない）
    - randomness_factor の確率で完全にランダムな候補（局所解・平坦地からの脱出）
    - それ以外はスコアが最大の候補
    """
    if not candidates:
        return None

    if rng.random() < randomness_factor:
        return choose_random(candidates, rng)

    best: Optional[Candidate] = None
    best_score = 0.0
    for candidate in candidates:
        value = score(candidate)
        if value > best_score:
            best_score = value
            best = candidate
    return best


def next_best_candidate(ctx: SearchContext, assignment: Assignment, model: Any) -> Optional[Candidate]:
    """現在のモデルから 1 ステップ分の移動先を決めます。"""
    influence = inconsistent_influence(ctx.system, model, ctx.state)
    key_counts: Dict[str, float] = {path: influence.get(path, 0) for path in ctx.domains}
    key = choose_key(key_counts, ctx.rng)
    if key is None:
        return None

    candidates = next_candidates(ctx, assignment, key)
    return min_conflicts(
        candidates,
        lambda c: candidate_score(
            ctx.system, c.model, ctx.state, c.preference, ctx.config.preference_factor
        ),
        ctx.rng,
        ctx.config.randomness_factor,
    )


class Solver(Generic[M, S]):
    """
    制約評価器を使って、制約を全て満たすモデルを局所探索で探します。

    Parameters
    ----------
    system : ConstraintSystem
        count_inconsistent_constraints / evaluate_statistics を持つ評価器。
    config : SolverConfig or dict, optional
        探索パラメータ。範囲外の値は丸められます。
    rng : RandomSource, optional
        random() を持つ乱数源。省略時は random.Random()。
    model_factory : callable, optional
        割り当て（パス -> 値）を評価器に渡すモデルに変換する関数。
        省略時は入れ子の dict を組み立てます。
    """

    def __init__(
        self,
        system: ConstraintSystem,
        config: ConfigLike = None,
        rng: Optional[RandomSource] = None,
        model_factory: Optional[ModelFactory] = None,
    ):
        self.system = system
        self.config = SolverConfig().merged(config)
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self.model_factory: ModelFactory = model_factory or build_model

    def solve(
        self,
        max_solutions: int,
        model_domain: Mapping[str, Any],
        state: Optional[S] = None,
        config: ConfigLike = None,
        rng: Optional[RandomSource] = None,
    ) -> SolveResult[M]:
        """
        最大 max_solutions 個の解を探します。

        config を渡すと、この呼び出しの間だけインスタンスの設定を上書きします。

        Returns
        -------
        SolveResult
            見つかった解（重複なし）と実際の反復回数など。
        """
        started = time.perf_counter()
        cfg = self.config.merged(config)
        domains = build_search_state(model_domain)
        ctx = SearchContext(
            system=self.system,
            state=state,
            config=cfg,
            rng=rng if rng is not None else self.rng,
            model_factory=self.model_factory,
            domains=domains,
            look_ahead=cfg.resolve_look_ahead(max_domain_size(domains)),
        )
        limit = max(1, int(max_solutions))

        logger.info(
            "[solve] Starting search: vars=%d, max_solutions=%d, look_ahead=%d, config=%s",
            len(domains), limit, ctx.look_ahead, cfg.model_dump(),
        )

        result: SolveResult[M] = SolveResult(paths=list(domains.keys()))
        assignment = current_assignment(domains)
        model = self.model_factory(assignment)

        for i in range(cfg.max_iterations):
            if len(ctx.solutions) >= limit:
                break

            if cfg.retry_iterations > 0 and i > 0 and i % cfg.retry_iterations == 0:
                randomize(domains, ctx.rng)
                assignment = current_assignment(domains)
                model = self.model_factory(assignment)
                result.restarts += 1
                logger.debug("[solve] iter=%d: randomized all cursors (restart #%d)", i, result.restarts)

            result.iterations += 1

            if is_feasible(self.system, model, state) and not ctx.is_known_solution(assignment):
                ctx.solutions.append(model)
                ctx.solution_assignments.append(assignment)
                logger.debug("[solve] iter=%d: solution #%d %s", i, len(ctx.solutions), assignment)

                # 別の解を探すため、最も好ましい値からやり直す
                reset_to_preferred(domains)
                assignment = current_assignment(domains)
                model = self.model_factory(assignment)
                continue

            # 違反あり（または既に見つけた解）なので 1 ステップ動く
            candidate = next_best_candidate(ctx, assignment, model)
            if candidate is not None:
                domains[candidate.key].index = candidate.index
                assignment = candidate.assignment
                model = candidate.model

            if result.iterations % PROGRESS_LOG_INTERVAL == 0:
                logger.debug(
                    "[solve] iterations = %d, solutions = %d",
                    result.iterations, len(ctx.solutions),
                )

        result.solutions = ctx.solutions
        result.assignments = ctx.solution_assignments
        result.elapsed_sec = time.perf_counter() - started

        logger.info(
            "[solve] Found %d solution(s) after %d iterations (restarts=%d, %.3fs)",
            len(result.solutions), result.iterations, result.restarts, result.elapsed_sec,
        )
        return result

    def find(
        self,
        max_solutions: int,
        model_domain: Mapping[str, Any],
        state: Optional[S] = None,
        config: ConfigLike = None,
        rng: Optional[RandomSource] = None,
    ) -> List[M]:
        """solve() の解だけを返す簡易版。"""
        return self.solve(max_solutions, model_domain, state, config, rng).solutions
