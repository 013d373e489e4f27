"""
Replica table binding.

Resolves, for a region, whether it owns the canonical writable table
(MAIN) or only references the existing replica by name (SECONDARY).
No I/O happens here; a name that does not resolve is reported by the
provisioning collaborator.
"""

from typing import Iterable, Optional

from .enums import Region, RegionRole, ResourceKind
from .models import PublishedTable, ResourceKey, TableHandle


def derive_table_name(base_name: str, suffix: Optional[str] = None) -> str:
    """
    Derive the table name shared by every region.

    Args:
        base_name: Application table base name
        suffix: Optional environment suffix, appended as '-{suffix}'

    Returns:
        The table name
    """
    if suffix:
        return f"{base_name}-{suffix}"
    return base_name


def bind_replica_table(
    region: Region,
    role: RegionRole,
    table_name: str,
    replication_regions: Iterable[Region] = (),
    partition_key: str = "pk",
    billing_mode: str = "PAY_PER_REQUEST",
) -> TableHandle:
    """
    Bind a region to the replicated table.

    MAIN receives an owning handle that defines schema, billing and the
    replica list. SECONDARY receives a reference resolved purely by name;
    the replication list and schema arguments are ignored for it.

    Args:
        region: Region being bound
        role: Role of that region in the current composition
        table_name: Shared table name (the replica join key)
        replication_regions: Replica targets, used by MAIN only
        partition_key: Partition key attribute name, used by MAIN only
        billing_mode: Billing mode, used by MAIN only

    Returns:
        TableHandle for the region
    """
    key = ResourceKey(region=region, kind=ResourceKind.TABLE)

    if role is RegionRole.MAIN:
        return TableHandle(
            key=key,
            table_name=table_name,
            role=role,
            replication_regions=tuple(replication_regions),
            partition_key=partition_key,
            billing_mode=billing_mode,
        )

    return TableHandle(key=key, table_name=table_name, role=role)


def publish_table(main_table: TableHandle) -> PublishedTable:
    """
    Publish the MAIN table's name for SECONDARY bindings.

    Raises:
        ValueError: If the handle is not an owning handle
    """
    if not main_table.owning:
        raise ValueError(f"Only the main region's table can be published, got {main_table.key}")
    return PublishedTable(
        name=main_table.table_name,
        main_region=main_table.region,
        replication_regions=main_table.replication_regions,
    )
