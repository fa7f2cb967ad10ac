"""Wallet RPC surface consumed by the engine.

The transport is provided by the host application. Return values mirror the
JSON payloads of the Chia wallet RPC with keys in snake_case.
"""

from __future__ import annotations

from typing import Any, Protocol


class WalletRpcProtocol(Protocol):
    def get_wallets(self) -> list[dict[str, Any]]: ...

    def get_did_wallets(self) -> list[dict[str, Any]]: ...

    def get_nfts(self) -> list[dict[str, Any]]: ...

    def get_nft_info(self, coin_id: str) -> dict[str, Any] | None: ...

    def get_nft_metadata(self, nft_id: str) -> dict[str, Any] | None: ...

    def get_sync_status(self) -> dict[str, Any]: ...

    def get_height_info(self) -> int | None: ...

    def get_current_address(self, wallet_id: int) -> str: ...

    def get_transaction(self, transaction_id: str) -> dict[str, Any] | None: ...

    def send_transaction(
        self,
        wallet_id: int,
        address: str,
        amount: int,
        fee: int,
        memos: list[str],
    ) -> dict[str, Any]: ...

    def cat_spend(
        self,
        wallet_id: int,
        address: str,
        amount: int,
        fee: int,
        memos: list[str],
    ) -> dict[str, Any]: ...

    def create_did_wallet(self, name: str, amount: int, fee: int) -> dict[str, Any]: ...

    def set_nft_did(
        self,
        wallet_id: int,
        nft_coin_ids: list[str],
        did_id: str,
        fee: int,
    ) -> dict[str, Any]: ...

    def get_did_metadata(self, wallet_id: int) -> dict[str, Any]: ...

    def update_did_metadata(
        self,
        wallet_id: int,
        metadata: dict[str, str],
        fee: int,
        reuse_puzhash: bool = False,
    ) -> dict[str, Any]: ...
