from typing import NamedTuple, Sequence

from openshift_allocations_mcp.utils.grouping import AggregateRow
from openshift_allocations_mcp.utils.qty import percentage_of
from openshift_allocations_mcp.utils.tree import compute_prefixes, is_direct_parent

EMPTY_LABEL = "(none)"


class PrefixedRow(NamedTuple):
    """An aggregate row with its tree prefix and display-ready values."""
    row: AggregateRow
    prefix: str

    @property
    def label(self) -> str:
        return self.row.path[-1] if self.row.path else ""

    @property
    def requested(self) -> str:
        return self.row.usage.requested.rescale_for_display()

    @property
    def limit(self) -> str:
        return self.row.usage.limit.rescale_for_display()

    @property
    def allocatable(self) -> str:
        return self.row.usage.allocatable.rescale_for_display()

    @property
    def free(self) -> str:
        return self.row.usage.free().rescale_for_display()

    @property
    def requested_percentage(self) -> float:
        return percentage_of(self.row.usage.requested, self.row.usage.allocatable)

    @property
    def limit_percentage(self) -> float:
        return percentage_of(self.row.usage.limit, self.row.usage.allocatable)


def prefix_rows(rows: Sequence[AggregateRow]) -> list[PrefixedRow]:
    """Attach tree prefixes to aggregate rows (rows must be in pre-order)."""
    prefixes = compute_prefixes(
        rows,
        lambda parent, row: is_direct_parent(parent.path, row.path),
        path_of=lambda row: row.path,
    )
    return [PrefixedRow(row, prefix) for row, prefix in zip(rows, prefixes)]


def format_percentage(value: float) -> str:
    return f"{value:.0f}%"


def render_allocation_table(rows: Sequence[PrefixedRow]) -> str:
    """
    Render prefixed rows as a Markdown table.

    The resource cell keeps the tree prefix in a code span so the
    indentation survives Markdown rendering.
    """
    if not rows:
        return "_No resources found._"

    output = [
        "| Resource | Requested | %Requested | Limit | %Limit | Allocatable | Free |",
        "|----------|----------:|-----------:|------:|-------:|------------:|-----:|",
    ]
    for row in rows:
        label = row.label or EMPTY_LABEL
        name = f"{row.prefix} {label}" if row.prefix else label
        output.append(
            f"| `{name}` "
            f"| {row.requested} "
            f"| {format_percentage(row.requested_percentage)} "
            f"| {row.limit} "
            f"| {format_percentage(row.limit_percentage)} "
            f"| {row.allocatable} "
            f"| {row.free} |"
        )
    return "\n".join(output)
