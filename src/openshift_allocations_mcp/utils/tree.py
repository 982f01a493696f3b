"""
Tree prefixes for ordered hierarchical rows.

Rows must arrive in pre-order: a parent right before its first child, and
all descendants of a row contiguous before its next sibling. ``aggregate``
output satisfies this. Input that breaks it raises ``TreeOrderError``.
"""
from typing import Callable, Hashable, Sequence, TypeVar

T = TypeVar("T")

BRANCH = "├─"
LAST_BRANCH = "└─"
PIPE = "│ "
SPACE = "  "


class TreeOrderError(ValueError):
    """Raised when rows are not in pre-order."""
    pass


def is_direct_parent(parent_path: Sequence[str], child_path: Sequence[str]) -> bool:
    """True when ``parent_path`` is ``child_path`` without its last component."""
    return (
        len(parent_path) + 1 == len(child_path)
        and tuple(parent_path) == tuple(child_path[:len(parent_path)])
    )


def _find_parents(
    items: Sequence[T],
    is_parent_of: Callable[[T, T], bool],
    path_of: Callable[[T], Sequence[Hashable]] | None,
) -> list[int | None]:
    parents: list[int | None] = []
    open_chain: list[int] = []
    # path -> index of rows whose subtree is already closed
    closed: dict[tuple, int] = {}
    for index, item in enumerate(items):
        while open_chain and not is_parent_of(items[open_chain[-1]], item):
            popped = open_chain.pop()
            if path_of is not None:
                closed[tuple(path_of(items[popped]))] = popped

        if open_chain:
            parent = open_chain[-1]
        else:
            # A parent further back means its subtree was interrupted
            if path_of is not None:
                candidate = closed.get(tuple(path_of(item))[:-1])
                earlier_rows = [] if candidate is None else [candidate]
            else:
                earlier_rows = range(index - 1, -1, -1)
            for earlier in earlier_rows:
                if is_parent_of(items[earlier], item):
                    raise TreeOrderError(
                        f"Row {index} follows its parent (row {earlier}) after unrelated rows; "
                        "rows must be in pre-order"
                    )
            parent = None

        parents.append(parent)
        open_chain.append(index)
    return parents


def compute_prefixes(
    items: Sequence[T],
    is_parent_of: Callable[[T, T], bool],
    path_of: Callable[[T], Sequence[Hashable]] | None = None,
) -> list[str]:
    """
    Compute a tree-drawing prefix for each row.

    Args:
        items: Rows in pre-order
        is_parent_of: Predicate ``(candidate, row)`` telling whether candidate
            is the direct parent of row
        path_of: Optional key path of a row, for predicates where a parent's
            path is the row's path without its last component. With it the
            pre-order check is a lookup instead of a scan over earlier rows.

    Returns:
        One prefix per row. Roots get an empty prefix; a child gets one
        segment per non-root ancestor ("│ " when that ancestor has later
        siblings, blank otherwise) then "├─", or "└─" for the last sibling.

    Raises:
        TreeOrderError: If a row's parent is found outside the open ancestor chain
    """
    parents = _find_parents(items, is_parent_of, path_of)

    last_child: dict[int | None, int] = {}
    for index, parent in enumerate(parents):
        last_child[parent] = index

    def has_later_sibling(index: int) -> bool:
        return last_child[parents[index]] != index

    prefixes = []
    for index, parent in enumerate(parents):
        if parent is None:
            prefixes.append("")
            continue

        segments = [BRANCH if has_later_sibling(index) else LAST_BRANCH]
        ancestor = parent
        while parents[ancestor] is not None:
            segments.append(PIPE if has_later_sibling(ancestor) else SPACE)
            ancestor = parents[ancestor]
        prefixes.append("".join(reversed(segments)))
    return prefixes
