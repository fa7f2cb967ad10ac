"""Owned .xch name aggregation and lifecycle status classification."""

from __future__ import annotations

import logging
import math
import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
from urllib.parse import unquote, urlsplit, urlunsplit

from namesdao_wallet.shared.protocols import WalletRpcProtocol
from namesdao_wallet.shared.validation import remove_hex_prefix

logger = logging.getLogger(__name__)

NAMESDAO_CREATOR_DID_HEX = "8ec8c193d7d8753707af7fc1936056eea8a3589c91250ce03f464f8d506b6fea"
NAMESDAO_COLLECTION_NAME = ".xch Namesdao Names"
GRACE_PERIOD_BLOCKS = 414_720
MAX_UNDERSCORE_RANK = 3

_NON_DIGITS = re.compile(r"[^0-9]")
_LEADING_UNDERSCORES = re.compile(r"^_+")

CollectionLookup = Callable[[str], "str | None"]


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class NameToken:
    nft_id: str
    nft_coin_id: str = ""
    minter_did: str | None = None
    owner_did: str | None = None
    data_uris: tuple[str, ...] = ()
    confirmation_height: int = 0
    mint_height: int = 0
    wallet_id: int | None = None

    @classmethod
    def from_rpc(cls, data: dict[str, Any]) -> "NameToken":
        return cls(
            nft_id=str(data.get("nft_id") or data.get("launcher_id") or ""),
            nft_coin_id=str(data.get("nft_coin_id") or ""),
            minter_did=data.get("minter_did"),
            owner_did=data.get("owner_did"),
            data_uris=tuple(data.get("data_uris") or ()),
            confirmation_height=_as_int(data.get("nft_coin_confirmation_height")),
            mint_height=_as_int(data.get("mint_height")),
            wallet_id=data.get("wallet_id"),
        )

    @property
    def minted_by_namesdao(self) -> bool:
        return remove_hex_prefix(self.minter_did or "").lower() == NAMESDAO_CREATOR_DID_HEX


@dataclass(frozen=True)
class NamesdaoNameEntry:
    name: str
    expiry_block: int
    nft_id: str
    token: NameToken

    @property
    def dot_xch(self) -> str:
        return format_dot_xch(self.name)


class LifecycleStatus(str, Enum):
    ACTIVE = "active"
    GRACE = "grace"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


def _strip_query_and_hash(uri: str) -> str:
    parts = urlsplit(uri)
    if parts.scheme and parts.netloc:
        return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    return uri.split("?")[0].split("#")[0]


def _last_path_segment(uri: str) -> str:
    return unquote(_strip_query_and_hash(uri).split("/")[-1])


def _remove_extension(filename: str) -> str:
    idx = filename.rfind(".")
    return filename[:idx] if idx > 0 else filename


def parse_name_and_expiry_from_uri(uri: str) -> tuple[str, int] | None:
    """Parse ``<name>-<expiry>.<ext>`` from the last path segment of ``uri``."""
    segment = _last_path_segment(uri or "")
    if not segment:
        return None
    parts = _remove_extension(segment).split("-")
    if len(parts) < 2:
        return None
    raw_name = parts[0].strip()
    expiry = _NON_DIGITS.sub("", parts[1])
    if not raw_name or not expiry:
        return None
    return raw_name.lower(), int(expiry)


def extract_from_data_uris(data_uris: tuple[str, ...] | list[str] | None) -> tuple[str, int] | None:
    if not data_uris or len(data_uris) < 2:
        return None
    return parse_name_and_expiry_from_uri(data_uris[-2])


def format_dot_xch(name: str) -> str:
    return f"{name}.xch"


def _preference(entry: NamesdaoNameEntry) -> tuple[int, int, int, str]:
    # nft_id is the last resort so that full ties do not depend on input order
    return (
        entry.expiry_block,
        entry.token.confirmation_height,
        entry.token.mint_height,
        entry.nft_id,
    )


def aggregate_names(
    tokens: list[NameToken],
    synced: bool,
    collection_lookup: CollectionLookup | None = None,
) -> list[NamesdaoNameEntry]:
    """Derive one entry per owned name from the wallet's NFTs.

    The collection name is only consulted once the wallet is synced; while
    syncing only the minter DID and the data URI are checked.
    """
    by_name: dict[str, NamesdaoNameEntry] = {}

    for token in tokens:
        if not token.minted_by_namesdao:
            continue

        parsed = extract_from_data_uris(token.data_uris)
        if parsed is None:
            continue

        if synced and collection_lookup is not None:
            try:
                collection_name = collection_lookup(token.nft_id)
            except Exception as e:
                logger.warning("Collection lookup failed for %s: %s", token.nft_id, e)
                continue
            if collection_name != NAMESDAO_COLLECTION_NAME:
                continue

        name, expiry_block = parsed
        candidate = NamesdaoNameEntry(
            name=name, expiry_block=expiry_block, nft_id=token.nft_id, token=token
        )
        current = by_name.get(name)
        if current is None or _preference(candidate) > _preference(current):
            by_name[name] = candidate

    return sorted(by_name.values(), key=lambda entry: entry.name)


def _has_height(current_height: Any) -> bool:
    if isinstance(current_height, bool) or not isinstance(current_height, (int, float)):
        return False
    return not math.isnan(current_height) and current_height >= 1


def classify_status(
    current_height: int | float | None,
    expiry_block: int,
    synced: bool,
    grace_period_blocks: int = GRACE_PERIOD_BLOCKS,
) -> LifecycleStatus:
    if not _has_height(current_height):
        return LifecycleStatus.UNKNOWN
    # Expiry past the grace window cannot be undone by further syncing.
    if current_height > expiry_block + grace_period_blocks:
        return LifecycleStatus.EXPIRED
    if not synced:
        return LifecycleStatus.UNKNOWN
    if current_height <= expiry_block:
        return LifecycleStatus.ACTIVE
    return LifecycleStatus.GRACE


def underscore_rank(name: str) -> int:
    match = _LEADING_UNDERSCORES.match(name)
    return min(len(match.group(0)) if match else 0, MAX_UNDERSCORE_RANK)


def owned_sort_key(entry: NamesdaoNameEntry) -> tuple[int, str]:
    return (underscore_rank(entry.name), entry.name)


@dataclass
class OwnedNames:
    active: list[NamesdaoNameEntry] = field(default_factory=list)
    grace: list[NamesdaoNameEntry] = field(default_factory=list)
    expired: list[NamesdaoNameEntry] = field(default_factory=list)
    unknown: list[NamesdaoNameEntry] = field(default_factory=list)
    synced: bool = False
    current_height: int | None = None
    is_loading: bool = False

    @property
    def total(self) -> int:
        return len(self.active) + len(self.grace) + len(self.expired) + len(self.unknown)

    @property
    def show_loading(self) -> bool:
        syncing = not self.synced or (self.current_height or 0) < 1
        return self.is_loading or syncing

    @property
    def can_show_empty(self) -> bool:
        return not self.show_loading and self.total == 0

    def group(self, status: LifecycleStatus) -> list[NamesdaoNameEntry]:
        return getattr(self, status.value)

    def status_of(self, name: str) -> LifecycleStatus | None:
        for status in LifecycleStatus:
            if any(entry.name == name for entry in self.group(status)):
                return status
        return None


def group_by_status(
    entries: list[NamesdaoNameEntry],
    current_height: int | None,
    synced: bool,
    is_loading: bool = False,
) -> OwnedNames:
    owned = OwnedNames(synced=synced, current_height=current_height, is_loading=is_loading)
    for entry in entries:
        owned.group(classify_status(current_height, entry.expiry_block, synced)).append(entry)
    for status in LifecycleStatus:
        owned.group(status).sort(key=owned_sort_key)
    return owned


@dataclass(frozen=True)
class WalletSnapshot:
    tokens: tuple[NameToken, ...] = ()
    synced: bool = False
    current_height: int | None = None


class NameOwnershipAggregator:
    """Recomputes the owned-name view from an explicit wallet snapshot."""

    def __init__(self, collection_lookup: CollectionLookup | None = None):
        self.collection_lookup = collection_lookup
        self._lock = threading.Lock()
        self._entries: list[NamesdaoNameEntry] = []
        self._owned = OwnedNames(is_loading=True)
        self._initial_scan_done = False

    @property
    def is_loading(self) -> bool:
        return not self._initial_scan_done

    @property
    def entries(self) -> list[NamesdaoNameEntry]:
        return list(self._entries)

    @property
    def owned(self) -> OwnedNames:
        return self._owned

    def refresh(self, snapshot: WalletSnapshot) -> OwnedNames:
        entries = aggregate_names(
            list(snapshot.tokens), snapshot.synced, self.collection_lookup
        )
        owned = group_by_status(entries, snapshot.current_height, snapshot.synced)
        with self._lock:
            self._entries = entries
            self._owned = owned
            self._initial_scan_done = True
        logger.debug(
            "Aggregated %d names (synced=%s, height=%s)",
            len(entries),
            snapshot.synced,
            snapshot.current_height,
        )
        return owned

    def find(self, name: str) -> NamesdaoNameEntry | None:
        key = name.lower().removesuffix(".xch")
        return next((entry for entry in self._entries if entry.name == key), None)


class NamesService:
    def __init__(
        self,
        wallet_rpc: WalletRpcProtocol,
        aggregator: NameOwnershipAggregator | None = None,
    ):
        self.wallet_rpc = wallet_rpc
        self._collections: dict[str, str] = {}
        self.aggregator = aggregator or NameOwnershipAggregator(self.collection_name)
        self._last_snapshot: WalletSnapshot | None = None

    def collection_name(self, nft_id: str) -> str | None:
        if nft_id in self._collections:
            return self._collections[nft_id]
        metadata = self.wallet_rpc.get_nft_metadata(nft_id) or {}
        collection = metadata.get("collection") or {}
        name = collection.get("name")
        # Metadata may not be fetched yet; only a known collection is final.
        if name:
            self._collections[nft_id] = name
        return name

    def load_snapshot(self) -> WalletSnapshot | None:
        try:
            tokens = tuple(NameToken.from_rpc(nft) for nft in self.wallet_rpc.get_nfts() or [])
            sync_status = self.wallet_rpc.get_sync_status() or {}
            height = self.wallet_rpc.get_height_info()
        except Exception as e:
            logger.warning("Failed to load wallet state for names: %s", e)
            return self._last_snapshot

        snapshot = WalletSnapshot(
            tokens=tokens,
            synced=bool(sync_status.get("synced")),
            current_height=height,
        )
        self._last_snapshot = snapshot
        return snapshot

    def refresh(self) -> OwnedNames:
        snapshot = self.load_snapshot()
        if snapshot is None:
            return self.aggregator.owned
        return self.aggregator.refresh(snapshot)

    def get_entry(self, name: str) -> NamesdaoNameEntry | None:
        return self.aggregator.find(name)
