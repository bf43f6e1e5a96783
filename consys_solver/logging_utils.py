# -*- coding: utf-8 -*-
"""
ログ出力の設定を行うモジュールです。

ハンドラは親ロガー "consys_solver" にだけ付け、各モジュールは
get_logger(__name__) で子ロガー（例: "consys_solver.csp.search"）を受け取ります。
呼び出し側が logging を設定していれば、その設定がそのまま使われます。
"""

from __future__ import annotations

import logging
from typing import Optional

# consys_solver パッケージ共通で使うロガー名
LOGGER_NAME = "consys_solver"


def _configure_default_handler(logger: logging.Logger) -> None:
    """まだハンドラが無ければ、標準エラー出力に INFO 以上を出す設定を行う。"""
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    consys_solver 全体で共通して使う logger を返します。

    Parameters
    ----------
    name : str, optional
        モジュール名（__name__）。"consys_solver." で始まる名前なら
        その子ロガーを、省略時は親ロガーを返します。
    """
    base = logging.getLogger(LOGGER_NAME)
    _configure_default_handler(base)

    if not name or name == LOGGER_NAME:
        return base
    prefix = LOGGER_NAME + "."
    return base.getChild(name[len(prefix):] if name.startswith(prefix) else name)
