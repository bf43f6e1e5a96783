# -*- coding: utf-8 -*-
"""consys_solver が送出する例外クラス。"""

from __future__ import annotations


class SolverError(Exception):
    """consys_solver の例外の基底クラス。"""


class InvalidDomainError(SolverError, ValueError):
    """
    ドメイン（またはドメインの木）の構成が不正なときに送出します。

    例:
    - Range の step が 0（値が無限に生成されてしまう）
    - 値が 1 つも無いドメイン
    - Domain でも mapping でもないノードを含むモデルドメイン
    """


class EvaluatorContractError(SolverError, RuntimeError):
    """
    制約評価器が負の値・非有限値・数値でない値を返したときに送出します。
    探索を続けても意味のある結果にならないため、即座に失敗させます。
    """
