"""
Tests for prefixed rows and the Markdown allocation table.
"""

import pytest

from openshift_allocations_mcp.utils.formatting import (
    PrefixedRow, format_percentage, prefix_rows, render_allocation_table,
)
from openshift_allocations_mcp.utils.grouping import (
    AggregateRow, UsageSums, aggregate, extract_kind, extract_node_name,
)
from openshift_allocations_mcp.utils.qty import Qty


@pytest.fixture
def prefixed(cluster_resources):
    return prefix_rows(aggregate(cluster_resources, [extract_kind, extract_node_name]))


class TestPrefixRows:

    def test_prefixes_follow_tree(self, prefixed):
        assert [(row.prefix, row.label) for row in prefixed] == [
            ("", "cpu"),
            ("├─", "n1"),
            ("└─", "n2"),
            ("", "memory"),
            ("├─", "n1"),
            ("└─", "n2"),
        ]

    def test_display_values(self, prefixed):
        cpu_n1 = prefixed[1]
        assert cpu_n1.requested == "2"
        assert cpu_n1.limit == "3"
        assert cpu_n1.allocatable == "4"
        assert cpu_n1.free == "1"
        assert cpu_n1.requested_percentage == pytest.approx(50.0)
        assert cpu_n1.limit_percentage == pytest.approx(75.0)

    def test_over_committed_node(self, prefixed):
        cpu_n2 = prefixed[2]
        assert cpu_n2.requested == "250m"
        assert cpu_n2.limit_percentage == pytest.approx(150.0)
        assert cpu_n2.free == "0"

    def test_memory_keeps_binary_suffixes(self, prefixed):
        memory = prefixed[3]
        assert memory.requested == "2.5Gi"
        assert memory.allocatable == "16Gi"
        assert memory.free == "13.5Gi"

    def test_percentage_without_allocatable(self):
        row = PrefixedRow(AggregateRow(("cpu",), UsageSums(requested=Qty.parse("1"))), "")
        assert row.requested_percentage == 0
        assert row.limit_percentage == 0


class TestRenderAllocationTable:

    def test_header_and_rows(self, prefixed):
        table = render_allocation_table(prefixed)
        lines = table.splitlines()
        assert lines[0] == "| Resource | Requested | %Requested | Limit | %Limit | Allocatable | Free |"
        assert len(lines) == 2 + len(prefixed)
        assert "| `├─ n1` | 2 | 50% | 3 | 75% | 4 | 1 |" in lines
        assert "| `└─ n2` | 2Gi | 25% | 0 | 0% | 8Gi | 6Gi |" in lines

    def test_root_rows_have_no_prefix(self, prefixed):
        table = render_allocation_table(prefixed)
        assert "| `cpu` |" in table
        assert "| `memory` |" in table

    def test_empty_label(self):
        rows = prefix_rows([
            AggregateRow(("cpu",), UsageSums()),
            AggregateRow(("cpu", ""), UsageSums()),
        ])
        assert "| `└─ (none)` |" in render_allocation_table(rows)

    def test_no_rows(self):
        assert render_allocation_table([]) == "_No resources found._"

    def test_format_percentage(self):
        assert format_percentage(33.4) == "33%"
        assert format_percentage(0) == "0%"
