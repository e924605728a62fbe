"""
Recursive tree walker for JSON-shaped payloads.

Visits every key/value pair of nested mappings and sequences and lets a
visitor swap a node for a new (key, value) pair. The walk is copy-on-write:
the input is never mutated and a fresh structure is returned.

Usage:
    from flagsync.core.sdk.walker import recursive_walk, replace_id_lists

    resolved = recursive_walk(
        {"condition": {"id": {"$ingroup": "beta"}}},
        replace_id_lists({"beta": ["u1", "u2"]}),
    )
    # {"condition": {"id": {"$in": ["u1", "u2"]}}}
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence, Union

NodeKey = Union[str, int]
Node = tuple[NodeKey, Any]
NodeVisitor = Callable[[NodeKey, Any], Union[Node, None]]

IdLists = Mapping[str, Sequence[str]]

GROUP_OPERATORS = {
    "$ingroup": "$in",
    "$ningroup": "$nin",
}


def recursive_walk(value: Any, on_node: NodeVisitor) -> Any:
    """
    Walk `value` depth-first and return a transformed copy.

    For every direct child of a mapping or list, `on_node(key, child)` is
    called. A returned `(new_key, new_value)` replaces the child in the same
    position and the walk continues into `new_value`; `None` keeps the child.
    List children keep their index whatever key the visitor returns.
    Scalars are returned as-is.
    """
    if isinstance(value, Mapping):
        walked: dict[Any, Any] = {}
        for key, child in value.items():
            replacement = on_node(key, child)
            if replacement is not None:
                key, child = replacement
            walked[key] = recursive_walk(child, on_node)
        return walked

    if isinstance(value, list):
        items = []
        for index, child in enumerate(value):
            replacement = on_node(index, child)
            if replacement is not None:
                child = replacement[1]
            items.append(recursive_walk(child, on_node))
        return items

    return value


def replace_id_lists(id_lists: IdLists) -> NodeVisitor:
    """
    Visitor that inlines saved-group membership into conditions.

    `{"$ingroup": "gid"}` becomes `{"$in": [...members]}` and `$ningroup`
    becomes `$nin`. Unknown group ids resolve to an empty list.
    """

    def visit(key: NodeKey, value: Any) -> Node | None:
        operator = GROUP_OPERATORS.get(key) if isinstance(key, str) else None
        if operator is None:
            return None
        members = id_lists.get(value) if isinstance(value, str) else None
        return operator, list(members or [])

    return visit
