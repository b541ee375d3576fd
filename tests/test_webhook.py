import pytest
from fastapi.testclient import TestClient
from twilio.request_validator import RequestValidator

from conftest import PROMOTER, FakeRedis, FakeSheets

from promobolsillo.bot import Bot
from promobolsillo.main import LIVENESS_TEXT, create_app

AUTH_TOKEN = "secret-token"


def form(body="", **extra):
    data = {"From": f"whatsapp:{PROMOTER}", "Body": body, "NumMedia": "0"}
    data.update(extra)
    return data


@pytest.fixture
def client(bot):
    return TestClient(create_app(bot=bot, redis_conn=None, validate_signature=False))


def test_liveness(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == LIVENESS_TEXT


def test_reply_is_twiml(client):
    response = client.post("/whatsapp", data=form("menu"))

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert "<Response><Message>" in response.text
    assert "Promobolsillo+" in response.text


def test_photo_and_listing_come_as_separate_messages(client):
    photo = "https://api.twilio.com/2010-04-01/Accounts/AC1/Messages/MM1/Media/ME1"
    client.post("/whatsapp", data=form("menu"))
    client.post("/whatsapp", data=form("", NumMedia="1", MediaUrl0=photo, MediaContentType0="image/jpeg"))

    response = client.post("/whatsapp", data=form("5"))

    assert response.text.count("<Message>") == 2
    assert f"<Media>{photo}</Media>" in response.text


def test_location_fields_are_read(client, sheets):
    client.post("/whatsapp", data=form("menu"))
    client.post("/whatsapp", data=form("1"))
    client.post("/whatsapp", data=form("1"))
    client.post("/whatsapp", data=form("", NumMedia="1", MediaUrl0="https://example.com/e.jpg"))

    response = client.post("/whatsapp", data=form("", Latitude="19.4326", Longitude="-99.1332"))

    assert "Entrada del día registrada" in response.text
    assert sheets.rows("JORNADAS")[0][5:7] == ["19.4326", "-99.1332"]


def test_error_returns_apology(twilio_client):
    bot = Bot(FakeSheets(fail=True), twilio_client, "whatsapp:+14155238886")
    client = TestClient(create_app(bot=bot, redis_conn=None, validate_signature=False))

    response = client.post("/whatsapp", data=form("menu"))

    assert response.status_code == 200
    assert "Ocurrió un error procesando tu mensaje" in response.text


def test_duplicate_message_sid_is_ignored(bot, sheets):
    conn = FakeRedis()
    client = TestClient(create_app(bot=bot, redis_conn=conn, validate_signature=False))
    client.post("/whatsapp", data=form("menu"))
    client.post("/whatsapp", data=form("1"))

    first = client.post("/whatsapp", data=form("1", MessageSid="SM123"))
    second = client.post("/whatsapp", data=form("1", MessageSid="SM123"))

    assert "foto de entrada" in first.text
    assert "<Message" not in second.text
    assert len(sheets.rows("JORNADAS")) == 1


def test_failed_message_can_be_retried(twilio_client):
    sheets = FakeSheets(fail=True)
    conn = FakeRedis()
    bot = Bot(sheets, twilio_client, "whatsapp:+14155238886")
    client = TestClient(create_app(bot=bot, redis_conn=conn, validate_signature=False))

    client.post("/whatsapp", data=form("menu", MessageSid="SM999"))
    assert conn.keys == {}

    sheets.fail = False
    response = client.post("/whatsapp", data=form("menu", MessageSid="SM999"))
    assert "Promobolsillo+" in response.text


def test_invalid_signature_is_rejected(bot):
    client = TestClient(create_app(bot=bot, redis_conn=None, validate_signature=True, auth_token=AUTH_TOKEN))

    response = client.post("/whatsapp", data=form("menu"), headers={"X-Twilio-Signature": "bad"})

    assert response.status_code == 403


def test_valid_signature_is_accepted(bot):
    client = TestClient(create_app(bot=bot, redis_conn=None, validate_signature=True, auth_token=AUTH_TOKEN))
    data = form("menu")
    signature = RequestValidator(AUTH_TOKEN).compute_signature("http://testserver/whatsapp", data)

    response = client.post("/whatsapp", data=data, headers={"X-Twilio-Signature": signature})

    assert response.status_code == 200
    assert "Promobolsillo+" in response.text
