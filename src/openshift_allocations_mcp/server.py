from mcp.server.fastmcp import FastMCP
from openshift_allocations_mcp.tools.allocations import get_resource_allocations
import logging

# Initialize the FastMCP server
mcp = FastMCP("OpenShift Allocations")

# Register tools
mcp.tool()(get_resource_allocations)

def main():
    """Main entry point for the server."""
    # stdout carries the MCP stdio transport, logging goes to stderr
    logging.basicConfig(level=logging.INFO)
    mcp.run()

if __name__ == "__main__":
    main()
