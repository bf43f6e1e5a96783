# -*- coding: utf-8 -*-
"""
モデルドメイン（ドメインの木）を探索用の状態に変換するモジュールです。

- モデルドメインの木を「パス -> Domain」の平坦な dict に変換する
- 各 Domain の値を一度だけ取り出し、選好度の高い順に並べたカーソルを作る
- カーソルの現在値から割り当て（パス -> 値）とモデル（入れ子の dict）を組み立てる

木のノードは Domain（葉）か Mapping（枝）のどちらかで、
isinstance で明示的に判定します。それ以外が混ざっていれば InvalidDomainError です。
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, MutableMapping, Optional

from ..domains import Domain
from ..errors import InvalidDomainError
from ..types import Assignment, DomainCursor, RandomSource

# モデル中の入れ子を表す区切り文字（例: "details.phone"）
PATH_SEPARATOR = "."

SearchState = Dict[str, DomainCursor]


def join_path(prefix: str, key: str) -> str:
    return f"{prefix}{PATH_SEPARATOR}{key}" if prefix else key


def flatten_model_domain(
    model_domain: Mapping[str, Any],
    prefix: str = "",
    res: Optional[Dict[str, Domain]] = None,
) -> Dict[str, Domain]:
    """
    モデルドメインの木を「パス -> Domain」の dict に平坦化します。

    Parameters
    ----------
    model_domain : Mapping
        葉が Domain、枝が Mapping の木。
    prefix : str
        再帰用。親ノードまでのパス。

    Returns
    -------
    dict[str, Domain]
        全ての葉をちょうど 1 回ずつ含む dict。
    """
    if res is None:
        res = {}
    if not isinstance(model_domain, Mapping):
        raise InvalidDomainError(
            f"model domain at '{prefix or '<root>'}' must be a mapping, got {type(model_domain).__name__}"
        )

    for key, node in model_domain.items():
        if not isinstance(key, str) or not key or PATH_SEPARATOR in key:
            raise InvalidDomainError(f"invalid model domain key {key!r} under '{prefix or '<root>'}'")
        path = join_path(prefix, key)
        if isinstance(node, Domain):
            res[path] = node
        elif isinstance(node, Mapping):
            flatten_model_domain(node, path, res)
        else:
            raise InvalidDomainError(
                f"'{path}' is neither a Domain nor a nested mapping ({type(node).__name__})"
            )
    return res


def build_search_state(model_domain: Mapping[str, Any], sort_by_preference: bool = True) -> SearchState:
    """
    モデルドメインから、solve 1 回分の探索状態（パス -> DomainCursor）を作ります。

    各ドメインの値はここで一度だけ取り出します。
    sort_by_preference=True なら選好度の高い順に並べるので、
    最も好ましい値は常にインデックス 0 になります。
    """
    state: SearchState = {}
    for path, domain in flatten_model_domain(model_domain).items():
        values = domain.preferred_values() if sort_by_preference else domain.values()
        if not values:
            raise InvalidDomainError(f"domain '{path}' has no values")

        preferences = [domain.preference(v) for v in values]
        # max は最初に見つかった最大値を返すので、同点なら先頭側が選ばれる
        preferred_index = max(range(len(preferences)), key=preferences.__getitem__)
        state[path] = DomainCursor(
            index=preferred_index,
            values=values,
            preferences=preferences,
            preferred_index=preferred_index,
        )
    return state


def insert_value(model: MutableMapping[str, Any], path: str, value: Any) -> None:
    """
    path（"a.b.c" 形式）の位置に value を書き込みます。
    途中の階層が無ければ空の dict を作ります。
    """
    keys = path.split(PATH_SEPARATOR)
    obj = model
    for key in keys[:-1]:
        if not isinstance(obj.get(key), MutableMapping):
            obj[key] = {}
        obj = obj[key]
    obj[keys[-1]] = value


def get_value(model: Mapping[str, Any], path: str) -> Any:
    """path（"a.b.c" 形式）の位置の値を返します。無ければ KeyError。"""
    obj: Any = model
    for key in path.split(PATH_SEPARATOR):
        obj = obj[key]
    return obj


def build_model(assignment: Mapping[str, Any]) -> Dict[str, Any]:
    """割り当て（パス -> 値）から入れ子の dict を組み立てます。"""
    model: Dict[str, Any] = {}
    for path, value in assignment.items():
        insert_value(model, path, value)
    return model


def current_assignment(state: SearchState) -> Assignment:
    """各カーソルが指している値の割り当て。"""
    return {path: cursor.value for path, cursor in state.items()}


def reset_to_preferred(state: SearchState) -> None:
    """全カーソルを最も好ましい値に戻します。"""
    for cursor in state.values():
        cursor.index = cursor.preferred_index


def randomize(state: SearchState, rng: RandomSource) -> None:
    """全カーソルを一様ランダムな位置に動かします。"""
    for cursor in state.values():
        cursor.index = min(int(rng.random() * cursor.size), cursor.size - 1)


def max_domain_size(state: SearchState) -> int:
    return max((cursor.size for cursor in state.values()), default=0)
