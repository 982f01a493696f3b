"""
Tests for MCP tool registration.
"""

import asyncio

from openshift_allocations_mcp import server


def test_allocation_tool_is_registered():
    tools = asyncio.run(server.mcp.list_tools())
    assert "get_resource_allocations" in [tool.name for tool in tools]
