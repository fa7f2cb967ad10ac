import tempfile
from pathlib import Path
from typing import Any

import pytest
from pgpy import PGPKey, PGPUID
from pgpy.constants import (
    CompressionAlgorithm,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)

from namesdao_wallet.features.names.service import NAMESDAO_CREATOR_DID_HEX
from namesdao_wallet.shared.bech32m import encode_puzzle_hash

OWNER_DID_HEX = "11" * 32
OTHER_DID_HEX = "22" * 32


class FakeWalletRpc:
    """In-memory wallet RPC recording every submission."""

    def __init__(self):
        self.wallets: list[dict[str, Any]] = [{"id": 1, "name": "Chia Wallet", "type": 0}]
        self.did_wallets: list[dict[str, Any]] = []
        self.nfts: list[dict[str, Any]] = []
        self.nft_info: dict[str, dict[str, Any]] = {}
        self.nft_metadata: dict[str, dict[str, Any]] = {}
        self.did_metadata: dict[int, dict[str, Any]] = {}
        self.transactions: dict[str, dict[str, Any]] = {}
        self.synced = True
        self.height: int | None = 1_000
        self.current_address = encode_puzzle_hash(bytes(32), "xch")
        self.metadata_tx_ids: list[list[str]] = []
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def _record(self, method: str, **kwargs: Any) -> None:
        self.calls.append((method, kwargs))
        if method in self.errors:
            raise self.errors[method]

    def calls_to(self, method: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == method]

    def get_wallets(self):
        self._record("get_wallets")
        return self.wallets

    def get_did_wallets(self):
        self._record("get_did_wallets")
        return list(self.did_wallets)

    def get_nfts(self):
        self._record("get_nfts")
        return self.nfts

    def get_nft_info(self, coin_id):
        self._record("get_nft_info", coin_id=coin_id)
        return self.nft_info.get(coin_id)

    def get_nft_metadata(self, nft_id):
        self._record("get_nft_metadata", nft_id=nft_id)
        return self.nft_metadata.get(nft_id)

    def get_sync_status(self):
        self._record("get_sync_status")
        return {"synced": self.synced}

    def get_height_info(self):
        self._record("get_height_info")
        return self.height

    def get_current_address(self, wallet_id):
        self._record("get_current_address", wallet_id=wallet_id)
        return self.current_address

    def get_transaction(self, transaction_id):
        self._record("get_transaction", transaction_id=transaction_id)
        return self.transactions.get(transaction_id)

    def send_transaction(self, wallet_id, address, amount, fee, memos):
        self._record(
            "send_transaction", wallet_id=wallet_id, address=address, amount=amount, fee=fee, memos=memos
        )
        return {"success": True, "transaction_id": "0xsend"}

    def cat_spend(self, wallet_id, address, amount, fee, memos):
        self._record("cat_spend", wallet_id=wallet_id, address=address, amount=amount, fee=fee, memos=memos)
        return {"success": True, "transaction_id": "0xcat"}

    def create_did_wallet(self, name, amount, fee):
        self._record("create_did_wallet", name=name, amount=amount, fee=fee)
        return {"success": True, "wallet_id": 2}

    def set_nft_did(self, wallet_id, nft_coin_ids, did_id, fee):
        self._record("set_nft_did", wallet_id=wallet_id, nft_coin_ids=nft_coin_ids, did_id=did_id, fee=fee)
        return {"success": True}

    def get_did_metadata(self, wallet_id):
        self._record("get_did_metadata", wallet_id=wallet_id)
        return {"metadata": dict(self.did_metadata.get(wallet_id, {}))}

    def update_did_metadata(self, wallet_id, metadata, fee, reuse_puzhash=False):
        self._record(
            "update_did_metadata", wallet_id=wallet_id, metadata=metadata, fee=fee, reuse_puzhash=reuse_puzhash
        )
        tx_ids = self.metadata_tx_ids.pop(0) if self.metadata_tx_ids else []
        return {"success": True, "transactions": [{"name": tx_id} for tx_id in tx_ids]}


def make_nft(
    name: str,
    expiry: int,
    nft_id: str | None = None,
    minter: str = NAMESDAO_CREATOR_DID_HEX,
    owner: str | None = None,
    confirmation_height: int = 10,
    mint_height: int = 5,
) -> dict[str, Any]:
    return {
        "nft_id": nft_id or f"nft1{name}{expiry}",
        "nft_coin_id": f"0x{'ab' * 32}",
        "minter_did": f"0x{minter}",
        "owner_did": owner,
        "data_uris": [
            f"https://names.namesdao.org/{name}-{expiry}.json",
            f"https://names.namesdao.org/{name}-{expiry}.png?v=2#frag",
            "https://names.namesdao.org/license.txt",
        ],
        "nft_coin_confirmation_height": confirmation_height,
        "mint_height": mint_height,
        "wallet_id": 3,
    }


@pytest.fixture(autouse=True)
def isolate_wallet_storage(monkeypatch):
    """Run tests with isolated wallet storage and no ambient registrar overrides."""
    monkeypatch.delenv("NAMESDAO_API_BASE", raising=False)
    monkeypatch.delenv("NAMESDAO_REGISTRAR_PUBKEY", raising=False)
    with tempfile.TemporaryDirectory(prefix="namesdao-wallet-test-") as tmp_dir:
        monkeypatch.setenv("NAMESDAO_WALLET_DIR", str(Path(tmp_dir)))
        yield


@pytest.fixture
def wallet_rpc():
    return FakeWalletRpc()


@pytest.fixture(scope="session")
def registrar_private_key():
    key = PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, 2048)
    key.add_uid(
        PGPUID.new("Namesdao Registrar", email="registrar@example.com"),
        usage={KeyFlags.Sign, KeyFlags.EncryptCommunications, KeyFlags.EncryptStorage},
        hashes=[HashAlgorithm.SHA256],
        ciphers=[SymmetricKeyAlgorithm.AES256],
        compression=[CompressionAlgorithm.Uncompressed],
    )
    return key


@pytest.fixture(scope="session")
def registrar_public_key(registrar_private_key):
    return str(registrar_private_key.pubkey)


@pytest.fixture
def xch_address():
    return encode_puzzle_hash(bytes(range(32)), "xch")


@pytest.fixture
def nft_factory():
    return make_nft


@pytest.fixture
def owner_did_hex():
    return OWNER_DID_HEX


@pytest.fixture
def other_did_hex():
    return OTHER_DID_HEX
