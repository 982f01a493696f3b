"""
Grouping of resource observations into per-group usage sums.

Observations are partitioned recursively by an ordered list of key
extractors (e.g. resource kind, then node name). Every group at every depth
yields one ``AggregateRow``, parents before their children.

Key extractors must be pure and total: they return ``""`` when the
observation has no value for their dimension. The aggregator does not guard
against extractors that break this contract.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, NamedTuple, Optional, Sequence

from openshift_allocations_mcp.utils.qty import Qty


class ResourceUsage(Enum):
    LIMIT = "limit"
    REQUESTED = "requested"
    ALLOCATABLE = "allocatable"


@dataclass(frozen=True)
class Location:
    node_name: Optional[str] = None
    namespace: Optional[str] = None
    pod_name: Optional[str] = None
    container_name: Optional[str] = None


@dataclass(frozen=True)
class Resource:
    """A single quantity observation, e.g. the cpu request of one container."""
    kind: str
    quantity: Qty
    usage: ResourceUsage
    location: Location = field(default_factory=Location)


@dataclass(frozen=True)
class UsageSums:
    """Sums of limit, requested and allocatable quantities for one group."""
    limit: Qty = field(default_factory=Qty)
    requested: Qty = field(default_factory=Qty)
    allocatable: Qty = field(default_factory=Qty)

    def free(self) -> Qty:
        return free_capacity(self)


class AggregateRow(NamedTuple):
    path: tuple[str, ...]
    usage: UsageSums


KeyExtractor = Callable[[Resource], str]


def extract_kind(resource: Resource) -> str:
    return resource.kind


def extract_node_name(resource: Resource) -> str:
    return resource.location.node_name or ""


def extract_namespace(resource: Resource) -> str:
    return resource.location.namespace or ""


def extract_pod_name(resource: Resource) -> str:
    return resource.location.pod_name or ""


def extract_container_name(resource: Resource) -> str:
    return resource.location.container_name or ""


GROUP_BY: dict[str, KeyExtractor] = {
    "resource": extract_kind,
    "node": extract_node_name,
    "namespace": extract_namespace,
    "pod": extract_pod_name,
    "container": extract_container_name,
}

DEFAULT_GROUP_BY = ("resource", "node")


def parse_group_by(value: str | Sequence[str] | None) -> list[KeyExtractor]:
    """
    Resolve grouping dimension names into key extractors.

    Args:
        value: Comma separated names (e.g. "resource,namespace") or a sequence
            of names. Empty input selects DEFAULT_GROUP_BY.

    Returns:
        Key extractors in grouping order

    Raises:
        ValueError: If a name is not a known dimension
    """
    if isinstance(value, str):
        names = [name.strip() for name in value.split(",") if name.strip()]
    else:
        names = list(value or [])
    if not names:
        names = list(DEFAULT_GROUP_BY)

    extractors = []
    for name in names:
        if name not in GROUP_BY:
            valid = ", ".join(GROUP_BY)
            raise ValueError(f"Unknown group_by dimension '{name}' (expected one of: {valid})")
        extractors.append(GROUP_BY[name])
    return extractors


def filter_resources(resources: Iterable[Resource], kinds: Iterable[str] | None) -> list[Resource]:
    """Keep only resources whose kind is in ``kinds``. No kinds keeps everything."""
    wanted = set(kinds or [])
    if not wanted:
        return list(resources)
    return [r for r in resources if r.kind in wanted]


def sum_by_usage(resources: Iterable[Resource]) -> UsageSums:
    limit = Qty()
    requested = Qty()
    allocatable = Qty()
    for resource in resources:
        if resource.usage == ResourceUsage.LIMIT:
            limit += resource.quantity
        elif resource.usage == ResourceUsage.REQUESTED:
            requested += resource.quantity
        elif resource.usage == ResourceUsage.ALLOCATABLE:
            allocatable += resource.quantity
    return UsageSums(limit=limit, requested=requested, allocatable=allocatable)


def free_capacity(sums: UsageSums) -> Qty:
    """
    Allocatable minus the larger of limit and requested, floored at zero.

    Capacity exactly equal to usage reports zero free.
    """
    used = max(sums.limit, sums.requested)
    if sums.allocatable > used:
        return sums.allocatable - used
    return Qty()


def _group_usage(
    resources: Sequence[Resource],
    prefix: tuple[str, ...],
    key_extractors: Sequence[KeyExtractor],
    depth: int,
) -> list[AggregateRow]:
    out: list[AggregateRow] = []
    if depth >= len(key_extractors):
        return out

    key_of = key_extractors[depth]
    groups: dict[str, list[Resource]] = defaultdict(list)
    for resource in resources:
        groups[key_of(resource)].append(resource)

    for key, group in groups.items():
        path = prefix + (key,)
        out.append(AggregateRow(path, sum_by_usage(group)))
        out.extend(_group_usage(group, path, key_extractors, depth + 1))
    return out


def aggregate(resources: Iterable[Resource], key_extractors: Sequence[KeyExtractor]) -> list[AggregateRow]:
    """
    Sum resources per group for every level of the grouping chain.

    Args:
        resources: Observations to aggregate
        key_extractors: One extractor per grouping level, outermost first

    Returns:
        Rows sorted by key path. Tuple ordering keeps every parent right
        before its children, so the result is a pre-order walk of the tree.
    """
    rows = _group_usage(list(resources), (), key_extractors, 0)
    rows.sort(key=lambda row: row.path)
    return rows
