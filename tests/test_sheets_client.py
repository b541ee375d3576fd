import threading

import pytest

from promobolsillo import sheets_utils
from promobolsillo.errors import SheetsConfigError
from promobolsillo.sheets_utils import SheetsClient, phones_match, same_phone


class FakeRequest:
    def __init__(self, result=None):
        self.result = result or {}

    def execute(self):
        return self.result


class FakeValues:
    def __init__(self):
        self.calls = []

    def get(self, **kwargs):
        self.calls.append(("get", kwargs))
        return FakeRequest({"values": [["a"]]})

    def append(self, **kwargs):
        self.calls.append(("append", kwargs))
        return FakeRequest()

    def update(self, **kwargs):
        self.calls.append(("update", kwargs))
        return FakeRequest()


class FakeService:
    def __init__(self):
        self.values_api = FakeValues()

    def spreadsheets(self):
        return self

    def values(self):
        return self.values_api


@pytest.fixture
def built(monkeypatch):
    services = []

    def fake_build(name, version, credentials=None, cache_discovery=True):
        service = FakeService()
        services.append(service)
        return service

    monkeypatch.setattr(sheets_utils, "build", fake_build)
    monkeypatch.setattr(
        sheets_utils.service_account.Credentials,
        "from_service_account_info",
        classmethod(lambda cls, info, scopes=None: object()),
    )
    return services


def test_writes_are_raw(built):
    client = SheetsClient("sheet-1", '{"type": "service_account"}')

    client.append_values("SESIONES!A2:D", [["+5215500000001", "MENU_PRINCIPAL", "{}", "2025-03-10T09:15:02-06:00"]])
    client.update_values("SESIONES!A2:D2", [["+5215500000001", "DIA_MENU", "{}", "2025-03-10T09:16:00-06:00"]])

    calls = built[0].values_api.calls
    assert [kind for kind, _ in calls] == ["append", "update"]
    assert all(kwargs["valueInputOption"] == "RAW" for _, kwargs in calls)
    assert calls[0][1]["body"]["values"][0][0] == "+5215500000001"


def test_each_thread_gets_its_own_service(built):
    client = SheetsClient("sheet-1", '{"type": "service_account"}')
    client.get_values("PUNTOS!A2:E")
    client.get_values("PUNTOS!A2:E")

    worker = threading.Thread(target=client.get_values, args=("PUNTOS!A2:E",))
    worker.start()
    worker.join()

    assert len(built) == 2
    assert len(built[0].values_api.calls) == 2
    assert len(built[1].values_api.calls) == 1


def test_missing_config_fails_on_first_access():
    client = SheetsClient("", "")
    with pytest.raises(SheetsConfigError):
        client.get_values("PUNTOS!A2:E")


def test_same_phone_ignores_lost_plus_but_not_prefixes():
    assert same_phone("5215500000001", "+5215500000001")
    assert same_phone("whatsapp:+52 1 55 0000 0001", "+5215500000001")
    assert not same_phone("+15551234567", "+5215551234567")
    assert not same_phone("", "+5215551234567")


def test_phones_match_allows_catalog_numbers_without_country_code():
    assert phones_match("5500000001", "+5215500000001")
    assert not phones_match("+5215500000001", "+15500000001")
