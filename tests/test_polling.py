import threading
from unittest.mock import Mock

from namesdao_wallet.shared.polling import (
    CancellationToken,
    ConfirmationPoller,
    PollResult,
    count_confirmed_transactions,
    is_transaction_confirmed,
)


class TestCancellationToken:
    def test_starts_active(self):
        token = CancellationToken()
        assert token.cancelled is False

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancelled is True
        assert token.wait(0) is True


class TestConfirmationPollerTick:
    def test_pending_then_done(self):
        results = iter([PollResult(done=False, message="1/2"), PollResult(done=True, value="ok")])
        on_done = Mock()
        on_pending = Mock()
        poller = ConfirmationPoller(check=lambda: next(results), on_done=on_done, on_pending=on_pending)

        assert poller.tick() is False
        on_pending.assert_called_once()
        assert on_pending.call_args[0][0].message == "1/2"

        assert poller.tick() is True
        assert poller.finished is True
        on_done.assert_called_once()
        assert on_done.call_args[0][0].value == "ok"

    def test_finished_poller_does_not_check_again(self):
        check = Mock(return_value=PollResult(done=True))
        poller = ConfirmationPoller(check=check, on_done=Mock())

        poller.tick()
        assert poller.tick() is True
        assert check.call_count == 1

    def test_check_error_is_reported_and_polling_continues(self):
        check = Mock(side_effect=[RuntimeError("rpc down"), PollResult(done=True)])
        on_error = Mock()
        on_done = Mock()
        poller = ConfirmationPoller(check=check, on_done=on_done, on_error=on_error)

        assert poller.tick() is False
        on_error.assert_called_once()
        assert str(on_error.call_args[0][0]) == "rpc down"

        assert poller.tick() is True
        on_done.assert_called_once()

    def test_cancelled_poller_skips_check(self):
        check = Mock(return_value=PollResult(done=True))
        on_done = Mock()
        poller = ConfirmationPoller(check=check, on_done=on_done)

        poller.cancel()
        assert poller.tick() is False
        check.assert_not_called()
        on_done.assert_not_called()

    def test_result_arriving_after_cancel_is_dropped(self):
        on_done = Mock()
        holder = {}

        def check():
            holder["poller"].cancel()
            return PollResult(done=True)

        poller = ConfirmationPoller(check=check, on_done=on_done)
        holder["poller"] = poller

        assert poller.tick() is False
        on_done.assert_not_called()
        assert poller.finished is False

    def test_start_after_cancel_is_noop(self):
        poller = ConfirmationPoller(check=Mock(), on_done=Mock())
        poller.cancel()
        poller.start()
        assert poller.is_running is False


class TestConfirmationPollerThread:
    def test_runs_on_background_thread(self):
        done = threading.Event()
        poller = ConfirmationPoller(
            check=lambda: PollResult(done=True, value=1),
            on_done=lambda result: done.set(),
            interval_seconds=0.01,
            name="test-poller",
        )

        poller.start()
        assert done.wait(2.0) is True
        poller.stop()
        assert poller.finished is True

    def test_stop_ends_pending_loop(self):
        calls = []
        poller = ConfirmationPoller(
            check=lambda: calls.append(1) or PollResult(done=False),
            on_done=Mock(),
            interval_seconds=0.01,
        )

        poller.start()
        poller.stop()
        assert poller.cancelled is True
        assert poller.is_running is False


class TestTransactionConfirmation:
    def test_confirmed_flag(self):
        assert is_transaction_confirmed({"confirmed": True}) is True

    def test_confirmed_height(self):
        assert is_transaction_confirmed({"confirmed": False, "confirmed_at_height": 12}) is True

    def test_unconfirmed(self):
        assert is_transaction_confirmed({"confirmed": False, "confirmed_at_height": 0}) is False
        assert is_transaction_confirmed({"confirmed_at_height": True}) is False
        assert is_transaction_confirmed(None) is False

    def test_count_treats_lookup_failure_as_unconfirmed(self):
        def fetch(tx_id):
            if tx_id == "0xbad":
                raise RuntimeError("not found")
            return {"confirmed": tx_id == "0xa"}

        assert count_confirmed_transactions(fetch, ["0xa", "0xb", "0xbad"]) == 1
