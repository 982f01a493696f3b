"""
Shared pytest fixtures for all tests.

Provides observation sets and canned `oc get ... -o json` payloads.
"""

import pytest

from openshift_allocations_mcp.utils.grouping import Location, Resource, ResourceUsage
from openshift_allocations_mcp.utils.qty import Qty


def make_resource(kind, quantity, usage, node=None, namespace=None, pod=None, container=None):
    return Resource(
        kind=kind,
        quantity=Qty.parse(quantity),
        usage=usage,
        location=Location(node_name=node, namespace=namespace, pod_name=pod, container_name=container),
    )


@pytest.fixture
def simple_resources():
    """Three requests across two kinds and two nodes."""
    return [
        make_resource("cpu", "1", ResourceUsage.REQUESTED, node="n2"),
        make_resource("cpu", "2", ResourceUsage.REQUESTED, node="n1"),
        make_resource("mem", "1Gi", ResourceUsage.REQUESTED, node="n1"),
    ]


@pytest.fixture
def cluster_resources():
    """Two nodes with capacity, requests and limits; cpu on n2 is over-committed."""
    return [
        make_resource("cpu", "4", ResourceUsage.ALLOCATABLE, node="n1"),
        make_resource("cpu", "4", ResourceUsage.ALLOCATABLE, node="n2"),
        make_resource("memory", "8Gi", ResourceUsage.ALLOCATABLE, node="n1"),
        make_resource("memory", "8Gi", ResourceUsage.ALLOCATABLE, node="n2"),
        make_resource("cpu", "500m", ResourceUsage.REQUESTED, "n1", "ns-a", "web", "app"),
        make_resource("cpu", "1", ResourceUsage.LIMIT, "n1", "ns-a", "web", "app"),
        make_resource("memory", "512Mi", ResourceUsage.REQUESTED, "n1", "ns-a", "web", "app"),
        make_resource("memory", "1Gi", ResourceUsage.LIMIT, "n1", "ns-a", "web", "app"),
        make_resource("cpu", "1500m", ResourceUsage.REQUESTED, "n1", "ns-b", "db", "postgres"),
        make_resource("cpu", "2", ResourceUsage.LIMIT, "n1", "ns-b", "db", "postgres"),
        make_resource("cpu", "250m", ResourceUsage.REQUESTED, "n2", "ns-a", "api", "app"),
        make_resource("cpu", "6", ResourceUsage.LIMIT, "n2", "ns-a", "api", "app"),
        make_resource("memory", "2Gi", ResourceUsage.REQUESTED, "n2", "ns-a", "api", "app"),
    ]


@pytest.fixture
def nodes_json():
    """Sample `oc get nodes -o json` output."""
    return {
        "items": [
            {
                "metadata": {"name": "n1"},
                "status": {"allocatable": {"cpu": "4", "memory": "8Gi", "pods": "110"}},
            },
            {
                "metadata": {"name": "n2"},
                "status": {"allocatable": {"cpu": "3500m", "memory": "16264364Ki", "pods": "110"}},
            },
        ]
    }


@pytest.fixture
def pods_json():
    """Sample `oc get pods --all-namespaces -o json` output."""
    return {
        "items": [
            {
                "metadata": {"name": "web", "namespace": "ns-a"},
                "spec": {
                    "nodeName": "n1",
                    "containers": [
                        {
                            "name": "app",
                            "resources": {
                                "requests": {"cpu": "500m", "memory": "256Mi"},
                                "limits": {"cpu": "1", "memory": "512Mi"},
                            },
                        },
                        {
                            "name": "sidecar",
                            "resources": {"requests": {"cpu": "100m"}},
                        },
                    ],
                },
                "status": {"phase": "Running"},
            },
            {
                "metadata": {"name": "pending", "namespace": "ns-b"},
                "spec": {
                    "containers": [
                        {"name": "worker", "resources": {"requests": {"cpu": "1"}}},
                    ],
                },
                "status": {"phase": "Pending", "nominatedNodeName": "n2"},
            },
            {
                "metadata": {"name": "done", "namespace": "ns-a"},
                "spec": {
                    "nodeName": "n1",
                    "containers": [
                        {"name": "job", "resources": {"requests": {"cpu": "2"}}},
                    ],
                },
                "status": {"phase": "Succeeded"},
            },
            {
                "metadata": {"name": "besteffort", "namespace": "ns-b"},
                "spec": {
                    "nodeName": "n2",
                    "containers": [{"name": "shell"}],
                },
                "status": {"phase": "Running"},
            },
        ]
    }
