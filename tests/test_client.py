"""Tests for the lookup client."""

from unittest.mock import MagicMock

import pytest
import requests

from asnscout.client import LookupClient, query_parameter
from asnscout.core import Config
from asnscout.errors import NotFoundError, TransportError

from conftest import CNE_LARGE, CNE_SMALL, NOT_FOUND, THERAVANCE


def _mock_response(status=200, payload=None, text=None):
    """Create a mock requests.Response."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
        resp.text = text or ""
    else:
        resp.json.return_value = payload
        resp.text = text if text is not None else repr(payload)
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session, monkeypatch):
    monkeypatch.delenv(Config.API_KEY_ENV, raising=False)
    manager = MagicMock()
    manager.get_session.return_value = session
    return LookupClient(api_url="https://lookup.test/api", session_manager=manager)


class TestQueryParameter:
    @pytest.mark.parametrize("query,expected", [
        ("100.19.12.21", "ip"),
        ("2001:db8::1", "ip"),
        ("14421", "asn"),
        ("microsoft", "org"),
        ("cne-as-ap cambodian", "org"),
    ])
    def test_detects_query_type(self, query, expected):
        assert query_parameter(query) == expected


class TestGetData:
    def test_single_match(self, client, session):
        session.get.return_value = _mock_response(payload=[THERAVANCE.to_dict()])

        result = client.get_data("14421")

        assert len(result) == 1
        assert result[0].equal(THERAVANCE)
        _, kwargs = session.get.call_args
        assert kwargs["params"] == {"asn": "14421"}

    def test_keeps_service_order(self, client, session):
        session.get.return_value = _mock_response(
            payload=[CNE_LARGE.to_dict(), CNE_SMALL.to_dict()]
        )

        result = client.get_data("7712")

        assert result[0].equal(CNE_LARGE)
        assert result[1].equal(CNE_SMALL)

    def test_ip_and_org_parameters(self, client, session):
        session.get.return_value = _mock_response(payload=[THERAVANCE.to_dict()])

        client.get_data("100.19.12.21")
        assert session.get.call_args[1]["params"] == {"ip": "100.19.12.21"}

        client.get_data("microsoft")
        assert session.get.call_args[1]["params"] == {"org": "microsoft"}

    def test_not_found_keeps_server_message(self, client, session):
        session.get.return_value = _mock_response(
            status=400, text='{"error":"no results found"}\n'
        )

        with pytest.raises(NotFoundError) as excinfo:
            client.get_data("1123")

        assert str(excinfo.value) == NOT_FOUND
        assert excinfo.value.query == "1123"

    @pytest.mark.parametrize("payload", [[], None])
    def test_empty_answer_is_not_found(self, client, session, payload):
        session.get.return_value = _mock_response(payload=payload, text="[]")

        with pytest.raises(NotFoundError) as excinfo:
            client.get_data("RANDOM_TEXT")

        assert str(excinfo.value) == NOT_FOUND

    def test_other_2xx_status_is_success(self, client, session):
        session.get.return_value = _mock_response(status=203, payload=[THERAVANCE.to_dict()])

        result = client.get_data("14421")

        assert result[0].equal(THERAVANCE)

    def test_no_content_is_not_found(self, client, session):
        session.get.return_value = _mock_response(status=204, payload=ValueError("empty"), text="")

        with pytest.raises(NotFoundError) as excinfo:
            client.get_data("14421")

        assert str(excinfo.value) == NOT_FOUND

    def test_redirect_status_is_transport_error(self, client, session):
        session.get.return_value = _mock_response(status=302, text="moved")

        with pytest.raises(TransportError):
            client.get_data("14421")

    def test_server_error_is_transport_error(self, client, session):
        session.get.return_value = _mock_response(status=502, text="bad gateway")

        with pytest.raises(TransportError) as excinfo:
            client.get_data("14421")

        assert str(excinfo.value) == "bad request: bad gateway"
        assert excinfo.value.status_code == 502
        assert not isinstance(excinfo.value, NotFoundError)

    def test_connection_failure_is_transport_error(self, client, session):
        session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(TransportError, match="request failed"):
            client.get_data("14421")

    def test_invalid_json_is_transport_error(self, client, session):
        session.get.return_value = _mock_response(payload=ValueError("no json"), text="<html>")

        with pytest.raises(TransportError, match="invalid response"):
            client.get_data("14421")

    def test_unexpected_shape_is_transport_error(self, client, session):
        session.get.return_value = _mock_response(payload={"status": "ok"})

        with pytest.raises(TransportError):
            client.get_data("14421")

    def test_empty_query_rejected(self, client, session):
        with pytest.raises(ValueError):
            client.get_data("   ")
        session.get.assert_not_called()


class TestApiKey:
    def test_explicit_key_sent_in_header(self, session):
        manager = MagicMock()
        manager.get_session.return_value = session
        session.get.return_value = _mock_response(payload=[THERAVANCE.to_dict()])
        client = LookupClient(api_key="secret", session_manager=manager)

        client.get_data("14421")

        assert session.get.call_args[1]["headers"] == {Config.API_KEY_HEADER: "secret"}

    def test_key_read_from_environment(self, session, monkeypatch):
        monkeypatch.setenv(Config.API_KEY_ENV, "from-env")
        client = LookupClient(session_manager=MagicMock())
        assert client.api_key == "from-env"

    def test_close_releases_session(self):
        manager = MagicMock()
        with LookupClient(session_manager=manager):
            pass
        manager.close.assert_called_once()
