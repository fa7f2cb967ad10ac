"""Website setup session for a single owned .xch name.

The session feeds wallet RPC results into the pure step machine in
``state_machine`` and owns at most one ``ConfirmationPoller`` at a time.
Wallet RPC calls run on the caller's thread (or on the poller thread while
confirming) and never while the session lock is held. Results that arrive
after the session was closed or moved to another step are dropped.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Callable

from namesdao_wallet.features.names.service import NameToken, format_dot_xch
from namesdao_wallet.features.website.dns import (
    merge_name,
    namesdao_blob_from_metadata,
    normalize_hostname,
    parse_namesdao_string,
    resolve_existing_host,
    serialize_namesdao,
    verify_name_configured,
)
from namesdao_wallet.features.website.identity import (
    find_did_wallet,
    nft_assigned_to_did,
    owned_by_user,
    wallet_did_id,
)
from namesdao_wallet.features.website.state_machine import (
    AssignmentConfirmed,
    AssignmentRequested,
    AssignmentSubmissionFailed,
    ConfigRequested,
    ConfigSubmissionFailed,
    IdentityConfirmed,
    IdentityRequested,
    IdentitySubmissionFailed,
    OwnershipObserved,
    SecondConfigConfirmed,
    SecondConfigSubmitted,
    SetupEvent,
    SetupStep,
    initial_step,
    step_index,
    transition,
)
from namesdao_wallet.shared.errors import (
    AssignmentSubmissionFailure,
    ConfigurationSubmissionFailure,
    ConfigurationVerificationFailure,
    IdentityCreationFailure,
    InvalidHostname,
)
from namesdao_wallet.shared.fees import MIN_FEE_XCH, fee_to_mojo, xch_to_mojo
from namesdao_wallet.shared.logging import get_logger
from namesdao_wallet.shared.polling import (
    ConfirmationPoller,
    PollResult,
    count_confirmed_transactions,
)
from namesdao_wallet.shared.protocols import WalletRpcProtocol
from namesdao_wallet.shared.validation import remove_hex_prefix

DEFAULT_DID_AMOUNT_XCH = "0.000001"
DEFAULT_NFT_WALLET_ID = 1

MSG_CREATING_DID = "Creating DID profile on blockchain..."
MSG_WAITING_DID = "Waiting for DID to appear in wallet..."
MSG_SUBMITTING = "Submitting transaction..."
MSG_WAITING_ASSIGN = "Waiting for NFT assignment to confirm on blockchain..."
MSG_SUBMITTING_CONFIG_1 = "Submitting configuration (1/2)..."
MSG_SUBMITTING_CONFIG_2 = "Submitting configuration (2/2)..."
MSG_WAITING_CONFIG_1 = "Waiting for on-chain confirmation (first transaction)"
MSG_WAITING_CONFIG_2 = "Waiting for on-chain confirmation (second transaction)"

ERR_VERIFY_DID = "Failed to verify DID creation"
ERR_VERIFY_ASSIGN = "Failed to verify NFT assignment"


def transaction_ids(response: dict[str, Any] | None) -> list[str]:
    transactions = (response or {}).get("transactions")
    if not isinstance(transactions, list):
        return []
    return [tx["name"] for tx in transactions if isinstance(tx, dict) and tx.get("name")]


def default_profile_name(name: str) -> str:
    return f"{format_dot_xch(name)} Profile"


@dataclass
class PendingConfiguration:
    payload: str
    host: str
    fee_mojos: int
    first_tx_ids: list[str] = field(default_factory=list)
    second_tx_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SetupSnapshot:
    name: str
    step: SetupStep
    step_index: int
    message: str = ""
    error: str | None = None
    selected_did_id: str | None = None
    did_ids: tuple[str, ...] = ()
    on_chain_host: str | None = None
    published_host: str | None = None
    is_open: bool = False

    @property
    def fqdn(self) -> str:
        return format_dot_xch(self.name)

    @property
    def url_prefill(self) -> str:
        return f"https://{self.on_chain_host}" if self.on_chain_host else "https://"


PollerFactory = Callable[..., ConfirmationPoller]


class WebsiteSetupSession:
    def __init__(
        self,
        wallet_rpc: WalletRpcProtocol,
        name: str,
        token: NameToken,
        poll_interval_seconds: float = ConfirmationPoller.DEFAULT_INTERVAL_SECONDS,
        on_change: Callable[[SetupSnapshot], None] | None = None,
        poller_factory: PollerFactory = ConfirmationPoller,
    ):
        self.wallet_rpc = wallet_rpc
        self.name = name.lower().removesuffix(".xch")
        self.logger = get_logger(__name__, {"name": format_dot_xch(self.name)})
        self.token = token
        self.poll_interval_seconds = poll_interval_seconds
        self.on_change = on_change
        self.poller_factory = poller_factory
        self._lock = threading.RLock()
        self._reset_state()

    def _reset_state(self) -> None:
        self._step = SetupStep.CREATE_IDENTITY
        self._message = ""
        self._error: str | None = None
        self._did_wallets: list[dict[str, Any]] = []
        self._live_token: NameToken | None = None
        self._selected_did_id: str | None = None
        self._pending: PendingConfiguration | None = None
        self._on_chain_host: str | None = None
        self._published_host: str | None = None
        self._poller: ConfirmationPoller | None = None
        self._open = False
        # Bumped on open and close; in-flight work compares against it.
        self._generation = getattr(self, "_generation", 0) + 1

    @property
    def fqdn(self) -> str:
        return format_dot_xch(self.name)

    @property
    def step(self) -> SetupStep:
        with self._lock:
            return self._step

    @property
    def poller(self) -> ConfirmationPoller | None:
        with self._lock:
            return self._poller

    def snapshot(self) -> SetupSnapshot:
        with self._lock:
            return SetupSnapshot(
                name=self.name,
                step=self._step,
                step_index=step_index(self._step),
                message=self._message,
                error=self._error,
                selected_did_id=self._selected_did_id,
                did_ids=tuple(
                    did for did in (wallet_did_id(w) for w in self._did_wallets) if did
                ),
                on_chain_host=self._on_chain_host,
                published_host=self._published_host,
                is_open=self._open,
            )

    def _notify(self) -> None:
        if self.on_change is None:
            return
        snapshot = self.snapshot()
        try:
            self.on_change(snapshot)
        except Exception as e:
            self.logger.error("Setup change observer failed: %s", e)

    def _dispatch(self, event: SetupEvent) -> SetupStep:
        """Apply ``event``; leaving a step cancels that step's poller."""
        with self._lock:
            previous = self._step
            self._step = transition(previous, event)
            if self._step is not previous:
                self.logger.debug(
                    "%s -> %s on %s",
                    previous.value,
                    self._step.value,
                    type(event).__name__,
                )
                self._cancel_poller()
            return self._step

    def _cancel_poller(self) -> None:
        if self._poller is not None:
            self._poller.cancel()
            self._poller = None

    def _is_current(self, generation: int, step: SetupStep | None = None) -> bool:
        with self._lock:
            if generation != self._generation or not self._open:
                return False
            return step is None or self._step is step

    # Chain state

    def _owner_did(self) -> str | None:
        source = self._live_token or self.token
        return source.owner_did or source.minter_did

    def _owner_wallet_id(self) -> int | None:
        wallet = find_did_wallet(self._owner_did(), self._did_wallets)
        return int(wallet["id"]) if wallet else None

    def _fetch_did_wallets(self) -> list[dict[str, Any]]:
        return list(self.wallet_rpc.get_did_wallets() or [])

    def _fetch_live_token(self) -> NameToken | None:
        if not self.token.nft_coin_id:
            return None
        info = self.wallet_rpc.get_nft_info(remove_hex_prefix(self.token.nft_coin_id))
        if not info:
            return None
        token = NameToken.from_rpc(info)
        if not token.nft_coin_id:
            token = replace(token, nft_coin_id=self.token.nft_coin_id)
        return token

    def _read_model(self, wallet_id: int) -> dict[str, Any]:
        response = self.wallet_rpc.get_did_metadata(wallet_id) or {}
        return parse_namesdao_string(namesdao_blob_from_metadata(response.get("metadata")))

    def _refresh_on_chain_host(self, generation: int) -> None:
        with self._lock:
            wallet_id = self._owner_wallet_id()
        if wallet_id is None:
            return
        try:
            host = resolve_existing_host(self._read_model(wallet_id), self.name)
        except Exception as e:
            self.logger.warning("Failed to read DID metadata: %s", e)
            return
        with self._lock:
            if generation == self._generation:
                self._on_chain_host = host

    def _observe_chain(self) -> tuple[bool, bool]:
        did_wallets = self._fetch_did_wallets()
        live_token = self._fetch_live_token()
        with self._lock:
            self._did_wallets = did_wallets
            if live_token is not None:
                self._live_token = live_token
            return owned_by_user(self._owner_did(), did_wallets), bool(did_wallets)

    # Operations

    def open(self) -> SetupSnapshot:
        """Derive the entry step from fresh DID and NFT state."""
        self.close(notify=False)
        with self._lock:
            self._open = True
            generation = self._generation

        owned, has_identities = self._observe_chain()
        with self._lock:
            if generation != self._generation:
                return self.snapshot()
            self._step = initial_step(owned, has_identities)
            step = self._step
        self.logger.info("Opened website setup at %s", step.value)

        if step is SetupStep.CONFIGURE_WEBSITE:
            self._refresh_on_chain_host(generation)
        self._notify()
        return self.snapshot()

    def refresh_ownership(self) -> SetupSnapshot:
        """Refetch chain state and skip steps that are already satisfied."""
        with self._lock:
            generation = self._generation
        owned, has_identities = self._observe_chain()
        if not self._is_current(generation):
            return self.snapshot()

        step = self._dispatch(OwnershipObserved(owned, has_identities))
        if step is SetupStep.CONFIGURE_WEBSITE:
            self._refresh_on_chain_host(generation)
        self._notify()
        return self.snapshot()

    def close(self, notify: bool = True) -> None:
        """Stop polling and forget transient state; on-chain effects remain."""
        with self._lock:
            poller = self._poller
            self._reset_state()
        if poller is not None:
            poller.stop()
        if notify:
            self._notify()

    def create_identity(
        self,
        profile_name: str | None = None,
        amount: Decimal | str = DEFAULT_DID_AMOUNT_XCH,
        fee: Decimal | str | None = MIN_FEE_XCH,
    ) -> SetupSnapshot:
        with self._lock:
            if not self._open or self._step is not SetupStep.CREATE_IDENTITY:
                return self.snapshot()
            generation = self._generation
            self._error = None
            self._dispatch(IdentityRequested())
            self._message = MSG_CREATING_DID
        self._notify()

        try:
            response = self.wallet_rpc.create_did_wallet(
                name=profile_name or default_profile_name(self.name),
                amount=xch_to_mojo(amount),
                fee=fee_to_mojo(fee),
            )
            if not response:
                raise IdentityCreationFailure("No response returned from DID creation")
        except Exception as e:
            self.logger.error("DID creation failed: %s", e)
            if self._is_current(generation, SetupStep.CONFIRM_IDENTITY):
                with self._lock:
                    self._error = str(e) or IdentityCreationFailure.user_message
                    self._message = ""
                    self._dispatch(IdentitySubmissionFailed(self._error))
                self._notify()
            return self.snapshot()

        if self._is_current(generation, SetupStep.CONFIRM_IDENTITY):
            self._start_poller(
                SetupStep.CONFIRM_IDENTITY,
                check=self._check_identity,
                on_done=self._identity_confirmed,
                error_message=ERR_VERIFY_DID,
            )
        return self.snapshot()

    def assign_name(self, did_id: str, fee: Decimal | str | None = None) -> SetupSnapshot:
        """Bind the name NFT to ``did_id``; the step moves before submission."""
        with self._lock:
            if not self._open or self._step is not SetupStep.ASSIGN_NAME:
                return self.snapshot()
            generation = self._generation
            self._error = None
            self._selected_did_id = did_id
            self._dispatch(AssignmentRequested(did_id))
            self._message = MSG_SUBMITTING
            wallet_id = self.token.wallet_id or DEFAULT_NFT_WALLET_ID
        self._notify()

        try:
            if not self.token.nft_coin_id:
                raise AssignmentSubmissionFailure("Missing NFT coin ID")
            self.wallet_rpc.set_nft_did(
                wallet_id=wallet_id,
                nft_coin_ids=[remove_hex_prefix(self.token.nft_coin_id)],
                did_id=did_id,
                fee=fee_to_mojo(fee),
            )
        except Exception as e:
            self.logger.error("NFT assignment failed: %s", e)
            if self._is_current(generation, SetupStep.CONFIRM_ASSIGN):
                with self._lock:
                    self._error = str(e) or AssignmentSubmissionFailure.user_message
                    self._message = ""
                    self._selected_did_id = None
                    self._dispatch(AssignmentSubmissionFailed(self._error))
                self._notify()
            return self.snapshot()

        if self._is_current(generation, SetupStep.CONFIRM_ASSIGN):
            with self._lock:
                self._message = MSG_WAITING_ASSIGN
            self._start_poller(
                SetupStep.CONFIRM_ASSIGN,
                check=self._check_assignment,
                on_done=self._assignment_confirmed,
                error_message=ERR_VERIFY_ASSIGN,
            )
        return self.snapshot()

    def configure_website(self, url: str, fee: Decimal | str | None = MIN_FEE_XCH) -> SetupSnapshot:
        """Publish ``url`` as the CNAME of this name in two transactions.

        Raises ``InvalidHostname`` or ``ConfigurationSubmissionFailure`` for
        input that cannot be submitted; the step is unchanged in that case.
        """
        host = normalize_hostname(url)
        with self._lock:
            if not self._open or self._step is not SetupStep.CONFIGURE_WEBSITE:
                return self.snapshot()
            generation = self._generation
            if not host:
                self._error = InvalidHostname.user_message
                raise InvalidHostname()
            wallet_id = self._owner_wallet_id()
            if wallet_id is None:
                self._error = "Missing profile wallet"
                raise ConfigurationSubmissionFailure("Missing profile wallet")
            self._error = None

        fee_mojos = fee_to_mojo(fee or MIN_FEE_XCH)
        try:
            model = self._read_model(wallet_id)
        except Exception as e:
            self.logger.warning("Using empty record model: %s", e)
            model = {}
        payload = serialize_namesdao(merge_name(model, self.fqdn, host))

        with self._lock:
            if not self._is_current(generation, SetupStep.CONFIGURE_WEBSITE):
                return self.snapshot()
            self._pending = PendingConfiguration(payload=payload, host=host, fee_mojos=fee_mojos)
            self._dispatch(ConfigRequested(host))
            self._message = MSG_SUBMITTING_CONFIG_1
        self._notify()

        try:
            response = self.wallet_rpc.update_did_metadata(
                wallet_id=wallet_id,
                metadata={"namesdao": payload},
                fee=fee_mojos,
                reuse_puzhash=False,
            )
        except Exception as e:
            self.logger.error("Configuration submission failed: %s", e)
            if self._is_current(generation, SetupStep.CONFIRM_CONFIG_1):
                with self._lock:
                    self._error = str(e) or ConfigurationSubmissionFailure.user_message
                    self._message = ""
                    self._pending = None
                    self._dispatch(ConfigSubmissionFailed(self._error))
                self._notify()
            return self.snapshot()

        if self._is_current(generation, SetupStep.CONFIRM_CONFIG_1):
            with self._lock:
                if self._pending is not None:
                    self._pending.first_tx_ids = transaction_ids(response)
                self._message = f"{MSG_WAITING_CONFIG_1}..."
            self._start_poller(
                SetupStep.CONFIRM_CONFIG_1,
                check=lambda: self._check_config_phase(first=True),
                on_done=self._second_config_submitted,
                error_message=ConfigurationVerificationFailure.user_message,
            )
        return self.snapshot()

    # Polling

    def _start_poller(
        self,
        step: SetupStep,
        check: Callable[[], PollResult[Any]],
        on_done: Callable[[PollResult[Any]], None],
        error_message: str,
    ) -> None:
        with self._lock:
            if not self._open or self._step is not step:
                return
            self._cancel_poller()
            generation = self._generation

            def is_live() -> bool:
                return self._poller is poller and self._is_current(generation, step)

            def handle_done(result: PollResult[Any]) -> None:
                with self._lock:
                    if not is_live():
                        return
                    on_done(result)
                self._notify()

            def handle_pending(result: PollResult[Any]) -> None:
                with self._lock:
                    if not is_live():
                        return
                    if result.message:
                        self._message = result.message
                self._notify()

            def handle_error(error: Exception) -> None:
                # Transient node trouble must not stop confirmation polling.
                with self._lock:
                    if not is_live():
                        return
                    self._error = error_message
                self._notify()

            poller = self.poller_factory(
                check=check,
                on_done=handle_done,
                on_pending=handle_pending,
                on_error=handle_error,
                interval_seconds=self.poll_interval_seconds,
                name=f"{self.fqdn}:{step.value}",
            )
            self._poller = poller
        self._notify()
        poller.start()

    def _check_identity(self) -> PollResult[list[dict[str, Any]]]:
        did_wallets = self._fetch_did_wallets()
        if did_wallets:
            return PollResult(done=True, value=did_wallets)
        return PollResult(done=False, message=MSG_WAITING_DID)

    def _identity_confirmed(self, result: PollResult[list[dict[str, Any]]]) -> None:
        self._did_wallets = result.value or []
        self._message = ""
        self._error = None
        self._dispatch(IdentityConfirmed())
        self.logger.info("DID profile available")

    def _check_assignment(self) -> PollResult[str | None]:
        live_token = self._fetch_live_token()
        did_wallets = self._fetch_did_wallets()
        with self._lock:
            self._did_wallets = did_wallets
            if live_token is not None:
                self._live_token = live_token
            source = self._live_token or self.token
            selected = self._selected_did_id
            wallet_id = self._owner_wallet_id()
        if not nft_assigned_to_did(source.owner_did, selected):
            return PollResult(done=False, message=MSG_WAITING_ASSIGN)

        host = None
        if wallet_id is not None:
            try:
                host = resolve_existing_host(self._read_model(wallet_id), self.name)
            except Exception as e:
                self.logger.warning("Failed to read DID metadata: %s", e)
        return PollResult(done=True, value=host)

    def _assignment_confirmed(self, result: PollResult[str | None]) -> None:
        self._selected_did_id = None
        self._on_chain_host = result.value
        self._message = ""
        self._error = None
        self._dispatch(AssignmentConfirmed())
        self.logger.info("Assigned to DID profile")

    def _phase_confirmed(self, tx_ids: list[str], host: str, wallet_id: int | None, label: str) -> tuple[bool, str]:
        if tx_ids:
            confirmed = count_confirmed_transactions(self.wallet_rpc.get_transaction, tx_ids)
            if confirmed == len(tx_ids):
                return True, ""
            return False, f"{label}: {confirmed}/{len(tx_ids)} confirmed..."

        # Without transaction ids, verify the published record itself.
        if wallet_id is not None and verify_name_configured(self._read_model(wallet_id), self.fqdn, host):
            return True, ""
        return False, f"{label}..."

    def _check_config_phase(self, first: bool) -> PollResult[list[str]]:
        with self._lock:
            pending = self._pending
            wallet_id = self._owner_wallet_id()
        if pending is None:
            return PollResult(done=False)

        tx_ids = pending.first_tx_ids if first else pending.second_tx_ids
        label = MSG_WAITING_CONFIG_1 if first else MSG_WAITING_CONFIG_2
        confirmed, message = self._phase_confirmed(tx_ids, pending.host, wallet_id, label)
        if not confirmed:
            return PollResult(done=False, message=message)
        if not first:
            return PollResult(done=True)

        # Phase two repeats the identical payload in a fresh transaction.
        if wallet_id is None:
            raise ConfigurationVerificationFailure("Missing profile wallet")
        with self._lock:
            self._message = MSG_SUBMITTING_CONFIG_2
        self._notify()
        response = self.wallet_rpc.update_did_metadata(
            wallet_id=wallet_id,
            metadata={"namesdao": pending.payload},
            fee=pending.fee_mojos,
            reuse_puzhash=False,
        )
        return PollResult(done=True, value=transaction_ids(response))

    def _second_config_submitted(self, result: PollResult[list[str]]) -> None:
        if self._pending is not None:
            self._pending.second_tx_ids = list(result.value or [])
        self._error = None
        self._message = f"{MSG_WAITING_CONFIG_2}..."
        self._dispatch(SecondConfigSubmitted())
        # Runs under the session lock on the phase one poller thread.
        self._start_poller(
            SetupStep.CONFIRM_CONFIG_2,
            check=lambda: self._check_config_phase(first=False),
            on_done=self._config_confirmed,
            error_message=ConfigurationVerificationFailure.user_message,
        )
        self.logger.debug("Second configuration transaction submitted")

    def _config_confirmed(self, result: PollResult[list[str]]) -> None:
        host = self._pending.host if self._pending else None
        self._published_host = host
        self._on_chain_host = host
        self._pending = None
        self._message = ""
        self._error = None
        self._dispatch(SecondConfigConfirmed())
        self.logger.info("Published website host %s", host)
