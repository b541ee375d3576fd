from conftest import PROMOTER, SUPERVISOR

from promobolsillo.models import EVENT_BRAND, ORIGIN_BRAND
from promobolsillo.services.ledger import SUBTYPE_OUT_OF_STOCK
from promobolsillo.states import (
    PHOTOS_BY_PROMOTER,
    STATE_MENU,
    STATE_SUP_FOTOS,
    STATE_SUP_GRUPO,
    STATE_SUP_MENU,
    STATE_SUP_PROMOTORES,
    PhotoList,
)

AUDIT_PHOTO = "https://api.twilio.com/media/auditoria.jpg"
BRAND_PHOTO = "https://api.twilio.com/media/agotado.jpg"


def seed_evidence(chat, bot):
    # Auditoría directa (riesgo BAJO) y evidencia de marca de producto agotado (riesgo ALTO)
    chat.say(PROMOTER, "menu")
    chat.say(PROMOTER, media_url=AUDIT_PHOTO)
    bot.evidence.register(
        PROMOTER, EVENT_BRAND, ORIGIN_BRAND,
        photo_url=BRAND_PHOTO, brand_id="M001", product_id="PR1", subtype=SUBTYPE_OUT_OF_STOCK,
    )


def test_non_supervisor_cannot_enter(chat):
    text = chat.say(PROMOTER, "sup")
    assert "no está dado de alta como supervisor" in text
    assert chat.state(PROMOTER) == STATE_MENU


def test_supervisor_photos_by_promoter_scenario(chat, bot):
    seed_evidence(chat, bot)

    text = chat.say(SUPERVISOR, "sup")
    assert "Hola, *Carla* (Supervisor)" in text
    assert chat.state(SUPERVISOR) == STATE_SUP_MENU

    text = chat.say(SUPERVISOR, "1")
    assert "1) Ana – 2 foto(s)" in text
    assert "2) Luis – 0 foto(s)" in text

    text = chat.say(SUPERVISOR, "9")
    assert "Elige un número válido de promotor" in text
    assert "1) Ana" in text
    assert chat.state(SUPERVISOR) == STATE_SUP_PROMOTORES

    text = chat.say(SUPERVISOR, "1")
    assert "Fotos de hoy de Ana" in text
    assert "AUDITORIA_DIRECTA – riesgo BAJO" in text
    assert "EVIDENCIA_MARCA (AGOTADO) – riesgo ALTO" in text
    assert chat.state(SUPERVISOR) == STATE_SUP_FOTOS


def test_ver_returns_detail_with_media(chat, bot):
    seed_evidence(chat, bot)
    chat.say(SUPERVISOR, "sup")
    chat.say(SUPERVISOR, "1")
    chat.say(SUPERVISOR, "1")

    replies = chat.send(SUPERVISOR, "ver 2")

    assert len(replies) == 1
    assert "Detalle de foto 2" in replies[0].text
    assert "Promotor: Ana" in replies[0].text
    assert replies[0].media_url == BRAND_PHOTO


def test_enviar_forwards_to_every_group_phone(chat, bot, twilio_client):
    seed_evidence(chat, bot)
    chat.say(SUPERVISOR, "sup")
    chat.say(SUPERVISOR, "1")
    chat.say(SUPERVISOR, "1")

    text = chat.say(SUPERVISOR, "enviar 1")
    assert "1) Grupo Cliente Uno – Cliente Uno" in text
    assert "Grupo inactivo" not in text
    assert chat.state(SUPERVISOR) == STATE_SUP_GRUPO

    text = chat.say(SUPERVISOR, "1")
    assert "enviada(s) al grupo *Grupo Cliente Uno*" in text
    assert chat.state(SUPERVISOR) == STATE_SUP_MENU

    sent = twilio_client.messages.sent
    assert [m["to"] for m in sent] == ["whatsapp:+5215511111111", "whatsapp:+5215522222222"]
    assert all(m["media_url"] == [AUDIT_PHOTO] for m in sent)
    assert all(m["from_"] == "whatsapp:+14155238886" for m in sent)
    assert "Promotor: Ana" in sent[0]["body"]


def test_risky_photos_and_enviar_todas(chat, bot, twilio_client):
    seed_evidence(chat, bot)
    chat.say(SUPERVISOR, "sup")

    text = chat.say(SUPERVISOR, "2")
    assert "riesgo MEDIO/ALTO" in text
    assert "1) EVIDENCIA_MARCA (AGOTADO) – Ana – riesgo ALTO" in text
    assert "AUDITORIA_DIRECTA" not in text

    chat.say(SUPERVISOR, "enviar todas")
    chat.say(SUPERVISOR, "1")

    assert [m["media_url"] for m in twilio_client.messages.sent] == [[BRAND_PHOTO], [BRAND_PHOTO]]


def test_group_pick_can_be_cancelled(chat, bot, twilio_client):
    seed_evidence(chat, bot)
    chat.say(SUPERVISOR, "sup")
    chat.say(SUPERVISOR, "2")
    chat.say(SUPERVISOR, "enviar 1")

    text = chat.say(SUPERVISOR, "cancelar")

    assert "(Supervisor)" in text
    assert chat.state(SUPERVISOR) == STATE_SUP_MENU
    assert twilio_client.messages.sent == []


def test_group_pick_invalid_number_relists(chat, bot):
    seed_evidence(chat, bot)
    chat.say(SUPERVISOR, "sup")
    chat.say(SUPERVISOR, "2")
    chat.say(SUPERVISOR, "enviar 1")

    text = chat.say(SUPERVISOR, "7")

    assert "Número inválido" in text
    assert "1) Grupo Cliente Uno" in text
    assert chat.state(SUPERVISOR) == STATE_SUP_GRUPO


def test_photo_index_out_of_range_is_rejected(chat, bot):
    seed_evidence(chat, bot)
    chat.say(SUPERVISOR, "sup")
    chat.say(SUPERVISOR, "1")
    chat.say(SUPERVISOR, "1")

    assert "Número inválido" in chat.say(SUPERVISOR, "ver 5")
    assert "Número inválido" in chat.say(SUPERVISOR, "enviar 0")
    assert "No entendí" in chat.say(SUPERVISOR, "mándala")
    assert chat.state(SUPERVISOR) == STATE_SUP_FOTOS


def test_enviar_with_empty_list_is_invalid(chat, bot):
    session = bot.sessions.load(SUPERVISOR)
    bot.sessions.save(session, STATE_SUP_FOTOS, PhotoList(mode=PHOTOS_BY_PROMOTER, evidence_ids=[]))

    assert "Número inválido" in chat.say(SUPERVISOR, "enviar 1")
    assert "Número inválido" in chat.say(SUPERVISOR, "enviar todas")


def test_send_without_twilio_reports_failure(sheets, chat, bot):
    bot.notifier.client = None
    seed_evidence(chat, bot)
    chat.say(SUPERVISOR, "sup")
    chat.say(SUPERVISOR, "2")
    chat.say(SUPERVISOR, "enviar 1")

    text = chat.say(SUPERVISOR, "1")

    assert "No se pudo enviar la foto al cliente" in text
    assert chat.state(SUPERVISOR) == STATE_SUP_MENU


def test_menu_returns_to_supervisor_menu_only_in_supervisor_states(chat):
    chat.say(SUPERVISOR, "sup")
    chat.say(SUPERVISOR, "1")
    assert "(Supervisor)" in chat.say(SUPERVISOR, "menu")

    assert "menú estándar" in chat.say(SUPERVISOR, "5")
    assert chat.state(SUPERVISOR) == STATE_MENU
    assert "soy *Promobolsillo+*" in chat.say(SUPERVISOR, "menu")


def test_removed_supervisor_falls_back_to_promoter_menu(chat, bot, sheets):
    chat.say(SUPERVISOR, "sup")
    sheets.seed("SUPERVISORES", [[SUPERVISOR, "S001", "Carla", "CENTRO", "REGIONAL", "FALSE"]])

    text = chat.say(SUPERVISOR, "1")

    assert "ya no aparece como supervisor" in text
    assert chat.state(SUPERVISOR) == STATE_MENU


def test_supervisor_without_team(chat, sheets):
    sheets.seed("PROMOTORES", [])
    chat.say(SUPERVISOR, "sup")
    assert "No hay promotores asociados" in chat.say(SUPERVISOR, "1")


def test_team_attendance(chat, bot):
    chat.say(PROMOTER, "menu")
    chat.say(PROMOTER, "1")
    chat.say(PROMOTER, "1")
    chat.say(PROMOTER, media_url="https://api.twilio.com/media/entrada.jpg")
    chat.say(PROMOTER, lat="19.4", lon="-99.1")

    chat.say(SUPERVISOR, "sup")
    text = chat.say(SUPERVISOR, "3")
    assert "1) Ana – 1 jornada(s)" in text
    assert "2) Luis – 0 jornada(s)" in text

    assert "Historial de asistencia de Ana" in chat.say(SUPERVISOR, "1")


def test_brand_digest(chat, bot):
    seed_evidence(chat, bot)
    chat.say(SUPERVISOR, "sup")

    text = chat.say(SUPERVISOR, "4")

    assert "• (sin tienda) – Marca Uno: 1 foto(s)" in text
    assert "• Ana – (sin tienda) – Marca Uno: 1" in text


def test_team_attendance_with_catalog_phone_without_country_code(chat, sheets):
    sheets.seed("PROMOTORES", [["5500000001", "P001", "Ana", "CENTRO", "WALMART", "TRUE", SUPERVISOR]])
    chat.say(PROMOTER, "menu")
    chat.say(PROMOTER, "1")
    chat.say(PROMOTER, "1")
    chat.say(PROMOTER, media_url="https://api.twilio.com/media/entrada.jpg")
    chat.say(PROMOTER, lat="19.4", lon="-99.1")

    chat.say(SUPERVISOR, "sup")
    assert "1) Ana – 1 jornada(s)" in chat.say(SUPERVISOR, "3")
    text = chat.say(SUPERVISOR, "1")
    assert "Historial de asistencia de Ana" in text
