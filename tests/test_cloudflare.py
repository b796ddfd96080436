"""
Tests for the Cloudflare DNS record client
"""

from unittest.mock import Mock

import pytest
import requests

from dns_updater.cloudflare import API_BASE_URL, DEFAULT_TIMEOUT, CloudflareDNS, to_record
from dns_updater.config import Credentials
from dns_updater.errors import (
    AmbiguousRecordError,
    APICommunicationError,
    APIError,
    ConfigError,
    MalformedRecordError,
    RecordNotFoundError,
)
from dns_updater.records import DNSRecord

BASE_URL = "https://cf.test/client/v4"


def make_response(body, status_code=200):
    resp = Mock(spec=requests.Response)
    resp.status_code = status_code
    resp.json.return_value = body
    return resp


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return CloudflareDNS("zone123", "acc123", "testtoken", session=session, base_url=BASE_URL)


A_RECORD = {"id": "record123", "type": "A", "name": "example.com", "content": "192.0.2.1"}


@pytest.mark.parametrize(
    "zone_id, account_id, api_token",
    [
        ("", "acc123", "token123"),
        ("zone123", "", "token123"),
        ("zone123", "acc123", ""),
    ],
)
def test_construction_requires_every_credential(zone_id, account_id, api_token, session):
    with pytest.raises(ConfigError):
        CloudflareDNS(zone_id, account_id, api_token, session=session)

    session.request.assert_not_called()


def test_construction_with_all_credentials(session):
    client = CloudflareDNS("zone123", "acc123", "token123", session=session)

    assert client.zone_id == "zone123"
    assert client.base_url == API_BASE_URL


def test_from_credentials(session):
    client = CloudflareDNS.from_credentials(
        Credentials("zone123", "acc123", "token123"), session=session
    )

    assert client.zone_id == "zone123"
    assert client.account_id == "acc123"


def test_fetch_record_single_match(client, session):
    session.request.return_value = make_response({"success": True, "result": [A_RECORD]})

    record = client.fetch_record("A", "example.com")

    assert record == DNSRecord(
        identifier="record123", name="example.com", record_type="A", content="192.0.2.1"
    )


def test_fetch_record_request_shape(client, session):
    session.request.return_value = make_response({"success": True, "result": [A_RECORD]})

    client.fetch_record("AAAA", "example.com", timeout=3)

    args, kwargs = session.request.call_args
    assert args == ("GET", f"{BASE_URL}/zones/zone123/dns_records")
    assert kwargs["params"] == {"page": 1, "per_page": 100, "type": "AAAA", "name": "example.com"}
    assert kwargs["headers"] == {
        "Authorization": "Bearer testtoken",
        "Content-Type": "application/json",
    }
    assert kwargs["timeout"] == 3


def test_fetch_record_uses_default_timeout(session):
    client = CloudflareDNS("zone123", "acc123", "testtoken", session=session, timeout=7)
    session.request.return_value = make_response({"success": True, "result": [A_RECORD]})

    client.fetch_record("A", "example.com")

    assert session.request.call_args.kwargs["timeout"] == 7


def test_fetch_record_not_found(client, session):
    session.request.return_value = make_response({"success": True, "result": []})

    with pytest.raises(RecordNotFoundError) as exc_info:
        client.fetch_record("A", "example.com")

    assert exc_info.value.record_type == "A"
    assert "example.com" in str(exc_info.value)


def test_fetch_record_ambiguous(client, session):
    other = dict(A_RECORD, id="record456", content="192.0.2.9")
    session.request.return_value = make_response({"success": True, "result": [A_RECORD, other]})

    with pytest.raises(AmbiguousRecordError):
        client.fetch_record("A", "example.com")


def test_fetch_record_unsuccessful_aggregates_messages(client, session):
    session.request.return_value = make_response(
        {
            "success": False,
            "errors": [{"code": 9109, "message": "Invalid access token"}, {"message": "Zone locked"}],
            "messages": ["Check your token", {"code": 1, "message": "See the docs"}],
            "result": None,
        },
        status_code=403,
    )

    with pytest.raises(APIError) as exc_info:
        client.fetch_record("A", "example.com")

    text = str(exc_info.value)
    for expected in ("Invalid access token", "Zone locked", "Check your token", "See the docs"):
        assert expected in text
    assert exc_info.value.status_code == 403
    assert exc_info.value.errors == ["Invalid access token", "Zone locked"]


def test_fetch_record_non_json_body(client, session):
    resp = make_response(None, status_code=502)
    resp.json.side_effect = ValueError("no JSON")
    session.request.return_value = resp

    with pytest.raises(APIError, match="502"):
        client.fetch_record("A", "example.com")


def test_fetch_record_transport_failure(client, session):
    session.request.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(APICommunicationError, match="connection refused"):
        client.fetch_record("A", "example.com")


def test_fetch_record_timeout(client, session):
    session.request.side_effect = requests.Timeout()

    with pytest.raises(APICommunicationError, match="timed out"):
        client.fetch_record("A", "example.com")


def test_update_record_sends_patch(client, session):
    session.request.return_value = make_response({"success": True, "result": {}})

    client.update_record("record123", "A", "example.com", "192.0.2.2", 120)

    args, kwargs = session.request.call_args
    assert args == ("PATCH", f"{BASE_URL}/zones/zone123/dns_records/record123")
    assert kwargs["json"] == {
        "type": "A",
        "name": "example.com",
        "content": "192.0.2.2",
        "ttl": 120,
        "proxied": False,
    }
    assert kwargs["headers"]["Authorization"] == "Bearer testtoken"
    assert kwargs["headers"]["Content-Type"] == "application/json"


def test_update_record_unsuccessful(client, session):
    session.request.return_value = make_response(
        {"success": False, "errors": [{"message": "Record is read-only"}], "messages": []},
        status_code=400,
    )

    with pytest.raises(APIError, match="Record is read-only"):
        client.update_record("record123", "A", "example.com", "192.0.2.2", 60)


def test_to_record_maps_fields():
    record = to_record({"id": "r1", "type": "AAAA", "name": "v6.example.com", "content": "2001:db8::1", "ttl": 1})

    assert record.identifier == "r1"
    assert record.record_type == "AAAA"
    assert record.name == "v6.example.com"
    assert record.content == "2001:db8::1"


def test_close_closes_session(client, session):
    client.close()

    session.close.assert_called_once()


def test_default_timeout_when_none(session):
    client = CloudflareDNS("zone123", "acc123", "testtoken", session=session, timeout=None)
    session.request.return_value = make_response({"success": True, "result": [A_RECORD]})

    client.fetch_record("A", "example.com")

    assert client.timeout == DEFAULT_TIMEOUT
    assert session.request.call_args.kwargs["timeout"] == DEFAULT_TIMEOUT


@pytest.mark.parametrize(
    "result",
    [
        ["garbage"],
        [None],
        [{"type": "A", "name": "example.com", "content": "192.0.2.1"}],
        [{"id": "", "type": "A", "name": "example.com", "content": "192.0.2.1"}],
        [{"id": "record123", "type": "A", "name": "example.com"}],
        {"id": "record123", "content": "192.0.2.1"},
    ],
)
def test_fetch_record_malformed_result(client, session, result):
    session.request.return_value = make_response({"success": True, "result": result})

    with pytest.raises(MalformedRecordError):
        client.fetch_record("A", "example.com")


def test_to_record_rejects_non_object():
    with pytest.raises(MalformedRecordError, match="object"):
        to_record("garbage")
