"""Private registration memos.

The memo carries ``"<name>.xch:<destination>[:<salt>]"`` encrypted to the
registrar's ASCII-armored OpenPGP public key. The armored PGP message is
percent-encoded into ``":<action>:<ciphertext>"``.
"""

from __future__ import annotations

import base64
import logging
import secrets
from urllib.parse import quote

from pgpy import PGPKey, PGPMessage
from pgpy.errors import PGPError

from namesdao_wallet.shared.errors import InvalidPublicKey

logger = logging.getLogger(__name__)

SALT_BYTES = 20
MEMO_ACTIONS = ("register", "renew")
# encodeURIComponent leaves these unescaped
URI_COMPONENT_SAFE = "-_.!~*'()"


def random_salt(length: int = SALT_BYTES) -> str:
    return base64.b64encode(secrets.token_bytes(length)).decode("ascii")


def load_public_key(public_key_armored: str | bytes | None) -> PGPKey:
    if not public_key_armored:
        raise InvalidPublicKey("Registrar public key is missing")

    try:
        key, _ = PGPKey.from_blob(public_key_armored)
    except (ValueError, TypeError, PGPError) as e:
        raise InvalidPublicKey(f"Invalid registrar public key: {e}") from e

    return key.pubkey if not key.is_public else key


def cloak_memo(
    payload: str,
    public_key_armored: str | bytes,
    include_salt: bool = True,
    action: str = "register",
) -> str:
    if action not in MEMO_ACTIONS:
        raise ValueError(f"Unsupported memo action: {action}")

    public_key = load_public_key(public_key_armored)
    message = f"{payload}:{random_salt()}" if include_salt else payload
    encrypted = public_key.encrypt(PGPMessage.new(message))
    return f":{action}:{quote(str(encrypted), safe=URI_COMPONENT_SAFE)}"


class MemoCloakingService:
    def __init__(self, public_key: str | None = None):
        self.public_key = public_key

    def cloak(
        self,
        payload: str,
        public_key: str | None = None,
        include_salt: bool = True,
        action: str = "register",
    ) -> str:
        key = public_key or self.public_key
        if not key:
            raise InvalidPublicKey("Registrar public key is missing")
        memo = cloak_memo(payload, key, include_salt=include_salt, action=action)
        logger.debug("Cloaked %s memo (%d chars)", action, len(memo))
        return memo

    @staticmethod
    def registration_payload(name: str, destination: str) -> str:
        return f"{name}.xch:{destination}"
