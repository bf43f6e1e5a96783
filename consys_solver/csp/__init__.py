# -*- coding: utf-8 -*-
"""
consys_solver.csp パッケージ

制約充足問題の局所探索に関する処理をまとめています。

主に以下の役割を持つモジュールから構成されています。
- model_domain.py : ドメインの木の平坦化・探索状態（カーソル）・モデルの組み立て
- scoring.py      : 候補モデルのスコアリングと評価器の戻り値の検証
- search.py       : min-conflicts 型の探索ループ（Solver）
"""
