"""Tests for the registrar API client and lookup mirrors."""

from unittest.mock import Mock

import pytest
from requests.exceptions import ConnectionError, HTTPError

from namesdao_wallet.features.registration.api import (
    AvailabilityResult,
    AvailabilityStatus,
    NamesdaoApiClient,
)
from namesdao_wallet.shared.errors import (
    AddressResolutionFailure,
    InvalidNameFormat,
    InvalidResponseShape,
    NameInGracePeriod,
    NameNotYetAvailable,
    NameReserved,
    NameUnavailable,
)
from namesdao_wallet.shared.network import NetworkError

LOOKUPS = (
    "https://mirror-one.example/{name}.json",
    "https://mirror-two.example/{name}.json",
)


def _response(payload=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.text = ""
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def client(session):
    return NamesdaoApiClient(
        base_url="https://api.namesdao.org", lookup_urls=LOOKUPS, session=session
    )


class TestAvailabilityResult:
    @pytest.mark.parametrize(
        "status, error_type",
        [
            ("taken", NameUnavailable),
            ("reserved", NameReserved),
            ("grace_period", NameInGracePeriod),
            ("invalid", InvalidNameFormat),
            ("surprise", InvalidResponseShape),
        ],
    )
    def test_error_mapping(self, status, error_type):
        result = AvailabilityResult.from_api("alice", {"status": status})
        assert isinstance(result.to_error(), error_type)

    def test_future_block(self):
        result = AvailabilityResult.from_api("alice", {"status": "future", "futureBlock": "5000000"})

        error = result.to_error()
        assert isinstance(error, NameNotYetAvailable)
        assert error.future_block == 5_000_000
        assert result.user_message == 'The name "alice" will be available at block 5000000'

    def test_available(self):
        result = AvailabilityResult.from_api("alice", {"status": "available"})
        assert result.is_available is True
        assert result.to_error() is None

    def test_unknown_status_keeps_raw_value(self):
        result = AvailabilityResult.from_api("alice", {"status": "pending", "message": "later"})
        assert result.status is AvailabilityStatus.UNKNOWN
        assert result.raw_status == "pending"
        assert result.user_message == "Unexpected response: later"


class TestCheckAvailability:
    def test_sends_name_as_query_param(self, client, session):
        session.get.return_value = _response({"results": [{"status": "available"}]})

        result = client.check_availability(" alice ")

        assert result.is_available is True
        assert result.name == "alice"
        args, kwargs = session.get.call_args
        assert args[0] == "https://api.namesdao.org/v1/check_name_availability"
        assert kwargs["params"] == {"name": "alice"}

    def test_missing_results(self, client, session):
        session.get.return_value = _response({"results": []})
        with pytest.raises(InvalidResponseShape, match="Unexpected response format"):
            client.check_availability("alice")

    def test_network_failure_is_not_retried(self, client, session):
        session.get.side_effect = ConnectionError()
        with pytest.raises(NetworkError):
            client.check_availability("alice")
        assert session.get.call_count == 1


class TestRegistrarInfoAndPricing:
    def test_get_info(self, client, session):
        session.get.return_value = _response({"paymentAddress": "namesdao.xch", "publicKey": "PEM"})

        info = client.get_info()

        assert info.payment_address == "namesdao.xch"
        assert info.public_key == "PEM"

    def test_get_pricing_tiers(self, client, session):
        session.get.return_value = _response(
            {"tiers": [{"nameType": "0u4", "fees": {"XCH": "0.6", "NAME": "20"}}]}
        )

        tiers = client.get_pricing_tiers()

        assert [tier.name_type for tier in tiers] == ["0u4"]
        assert str(tiers[0].xch_price) == "0.6"

    def test_get_pricing_tiers_rejects_bad_shape(self, client, session):
        session.get.return_value = _response({"tiers": "nope"})
        with pytest.raises(InvalidResponseShape, match="Invalid pricing data"):
            client.get_pricing_tiers()


class TestResolveName:
    def test_first_mirror_wins(self, client, session, xch_address):
        session.get.return_value = _response({"address": xch_address})

        assert client.resolve_name("Namesdao.xch") == xch_address
        assert session.get.call_args[0][0] == "https://mirror-one.example/namesdao.json"

    def test_falls_through_to_next_mirror(self, client, session, xch_address):
        session.get.side_effect = [
            _response({"address": "not-an-address"}),
            _response({"address": xch_address}),
        ]

        assert client.resolve_name("namesdao") == xch_address
        assert session.get.call_count == 2

    def test_name_is_uri_encoded(self, client, session, xch_address):
        session.get.return_value = _response({"address": xch_address})

        client.resolve_name("a b")

        assert session.get.call_args[0][0] == "https://mirror-one.example/a%20b.json"

    def test_all_mirrors_fail(self, client, session):
        session.get.side_effect = [_response(status_code=500), _response({})]

        with pytest.raises(AddressResolutionFailure) as exc_info:
            client.resolve_name("namesdao.xch")
        assert "Failed to resolve namesdao.xch" in str(exc_info.value)
        assert "No address in response" in str(exc_info.value)

    def test_empty_name(self, client):
        with pytest.raises(AddressResolutionFailure, match="Empty name"):
            client.resolve_name("  ")
