from openshift_allocations_mcp.utils.oc import run_oc_json, OCError
from openshift_allocations_mcp.utils.qty import Qty, QuantityParseError
from openshift_allocations_mcp.utils.grouping import (
    Location, Resource, ResourceUsage, aggregate, filter_resources, parse_group_by,
)
from openshift_allocations_mcp.utils.formatting import prefix_rows, render_allocation_table
import asyncio
import logging

logger = logging.getLogger("openshift-allocations-mcp")

# Finished pods no longer hold their requests on the node
SKIPPED_POD_PHASES = {"Succeeded", "Failed"}


async def collect_from_nodes() -> list[Resource]:
    """
    Read the allocatable capacity of every node.

    Raises:
        OCError: If the node list cannot be fetched
        QuantityParseError: If a node reports a malformed quantity
    """
    nodes_json = await run_oc_json(["get", "nodes"])
    resources = []
    for node in nodes_json.get("items", []):
        location = Location(node_name=node["metadata"]["name"])
        allocatable = node.get("status", {}).get("allocatable") or {}
        for kind, value in allocatable.items():
            resources.append(Resource(
                kind=kind,
                quantity=Qty.parse(value),
                usage=ResourceUsage.ALLOCATABLE,
                location=location,
            ))
    return resources


async def collect_from_pods(namespace: str | None = None) -> list[Resource]:
    """
    Read container requests and limits of every active pod.

    Args:
        namespace: Restrict to one namespace (default: all namespaces)

    Raises:
        OCError: If the pod list cannot be fetched
        QuantityParseError: If a container declares a malformed quantity
    """
    args = ["get", "pods"] + (["-n", namespace] if namespace else ["--all-namespaces"])
    pods_json = await run_oc_json(args)

    resources = []
    for pod in pods_json.get("items", []):
        metadata = pod.get("metadata", {})
        spec = pod.get("spec", {})
        status = pod.get("status", {})

        if status.get("phase") in SKIPPED_POD_PHASES:
            continue

        # A pending pod may already be nominated to a node by the scheduler
        node_name = status.get("nominatedNodeName") or spec.get("nodeName")

        for container in spec.get("containers", []):
            location = Location(
                node_name=node_name,
                namespace=metadata.get("namespace"),
                pod_name=metadata.get("name"),
                container_name=container.get("name"),
            )
            requirements = container.get("resources") or {}
            for usage, section in ((ResourceUsage.REQUESTED, "requests"), (ResourceUsage.LIMIT, "limits")):
                for kind, value in (requirements.get(section) or {}).items():
                    resources.append(Resource(
                        kind=kind,
                        quantity=Qty.parse(value),
                        usage=usage,
                        location=location,
                    ))
    return resources


async def collect_resources(namespace: str | None = None) -> list[Resource]:
    """Collect node capacity and pod requests/limits in parallel."""
    node_resources, pod_resources = await asyncio.gather(
        collect_from_nodes(),
        collect_from_pods(namespace),
    )
    logger.info(
        f"Collected {len(node_resources)} allocatable and {len(pod_resources)} request/limit observations"
    )
    return node_resources + pod_resources


def build_allocation_report(
    resources: list[Resource],
    group_by: str = "resource,node",
    kinds: list[str] | None = None,
) -> str:
    """
    Aggregate observations and render them as a tree-shaped Markdown table.

    Raises:
        ValueError: If group_by names an unknown dimension
    """
    key_extractors = parse_group_by(group_by)
    selected = filter_resources(resources, kinds)
    rows = aggregate(selected, key_extractors)
    logger.info(f"Aggregated {len(selected)} observations into {len(rows)} rows")

    output = ["### Resource Allocations", ""]
    output.append(render_allocation_table(prefix_rows(rows)))
    output.append("")
    output.append("_Free = Allocatable - max(Requested, Limit), never below zero._")
    return "\n".join(output)


async def get_resource_allocations(group_by: str = "resource,node", resources: str = "", namespace: str = "") -> str:
    """
    Report requested, limit, allocatable and free resources across the cluster as a tree.

    Why Essential:
    - Capacity planning: Shows how much of each node's allocatable capacity is reserved.
    - Over-commit detection: Limits above allocatable show where nodes are over-committed.
    - Scheduling headroom: Free column shows what new pods can still request.

    Args:
        group_by: Comma separated grouping chain, outermost first.
            Dimensions: resource, node, namespace, pod, container.
        resources: Comma separated resource names to keep (e.g. "cpu,memory"). Empty keeps all.
        namespace: Only count pods of this namespace. Node allocatable is always included.

    Returns:
        Markdown table with one row per group, nested with tree prefixes.
    """
    kinds = [kind.strip() for kind in resources.split(",") if kind.strip()]
    try:
        parse_group_by(group_by)
        observations = await collect_resources(namespace or None)
        return build_allocation_report(observations, group_by, kinds)

    except QuantityParseError as e:
        # Partial sums would be misleading, so the whole report is dropped
        logger.error(f"Aborting allocation report: {e}")
        return f"❌ Report aborted, cluster returned a malformed quantity: {e}"
    except OCError as e:
        return f"❌ Error fetching cluster resources: {e}"
    except ValueError as e:
        return f"❌ Invalid arguments: {e}"
