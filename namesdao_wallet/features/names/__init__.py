"""Owned names feature module."""

from namesdao_wallet.features.names.service import (
    GRACE_PERIOD_BLOCKS,
    NAMESDAO_COLLECTION_NAME,
    NAMESDAO_CREATOR_DID_HEX,
    LifecycleStatus,
    NameOwnershipAggregator,
    NamesdaoNameEntry,
    NamesService,
    NameToken,
    OwnedNames,
    WalletSnapshot,
    aggregate_names,
    classify_status,
    group_by_status,
)

__all__ = [
    "GRACE_PERIOD_BLOCKS",
    "NAMESDAO_COLLECTION_NAME",
    "NAMESDAO_CREATOR_DID_HEX",
    "LifecycleStatus",
    "NameOwnershipAggregator",
    "NamesdaoNameEntry",
    "NamesService",
    "NameToken",
    "OwnedNames",
    "WalletSnapshot",
    "aggregate_names",
    "classify_status",
    "group_by_status",
]
