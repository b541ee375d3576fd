# Operación en tienda: visita, inventario / ventas, competencia, foto de exhibición y cierre.

from conftest import PROMOTER

from promobolsillo.states import (
    STATE_MENU,
    STATE_OPER_CANTIDAD,
    STATE_OPER_PRODUCTO,
    STATE_OPER_TIENDA,
    STATE_OPER_VISITA,
)

EXHIBITION_PHOTO = "https://api.twilio.com/media/exhibicion.jpg"


def start_visit(chat):
    chat.say(PROMOTER, "menu")
    chat.say(PROMOTER, "2")
    chat.say(PROMOTER, "1")
    return chat.say(PROMOTER, "1")


def test_store_list_is_filtered_by_region_or_chain(chat):
    chat.say(PROMOTER, "menu")
    assert "Iniciar visita a tienda" in chat.say(PROMOTER, "2")

    text = chat.say(PROMOTER, "1")
    assert "1) Walmart Centro (CDMX)" in text
    assert "Soriana Norte" not in text

    assert "Elige un número válido de tienda" in chat.say(PROMOTER, "5")
    assert chat.state(PROMOTER) == STATE_OPER_TIENDA


def test_start_visit(chat, sheets):
    text = start_visit(chat)

    assert "Visita iniciada" in text
    assert "Visita en Walmart Centro (CDMX)" in text
    assert chat.state(PROMOTER) == STATE_OPER_VISITA
    visit = sheets.rows("VISITAS")[0]
    assert visit[1:3] == ["P001", "T001"]
    assert visit[5] == ""
    assert visit[6] == PROMOTER


def test_inventory_loop_awards_once_per_product(chat, bot, sheets):
    start_visit(chat)

    text = chat.say(PROMOTER, "1")
    assert "1) Galletas 200g" in text
    assert "2) Jugo 1L" in text
    assert "Cereal" not in text

    assert "Galletas 200g" in chat.say(PROMOTER, "1")
    assert chat.state(PROMOTER) == STATE_OPER_CANTIDAD
    assert "cantidad válida" in chat.say(PROMOTER, "doce")
    assert "cantidad válida" in chat.say(PROMOTER, "-3")

    text = chat.say(PROMOTER, "12")
    assert "Registrado: *Galletas 200g* – 12 pieza(s)" in text
    assert chat.state(PROMOTER) == STATE_OPER_PRODUCTO

    chat.say(PROMOTER, "1")
    chat.say(PROMOTER, "5")

    rows = sheets.rows("INVENTARIO")
    visit_id = sheets.rows("VISITAS")[0][0]
    assert [r[3:] for r in rows] == [
        [visit_id, "T001", "PR1", "12"],
        [visit_id, "T001", "PR1", "5"],
    ]
    assert bot.points.summary(PROMOTER).operacion == 1

    assert "Captura terminada" in chat.say(PROMOTER, "no")
    assert chat.state(PROMOTER) == STATE_OPER_VISITA


def test_product_list_can_be_shown_again(chat):
    start_visit(chat)
    chat.say(PROMOTER, "2")
    assert "1) Galletas 200g" in chat.say(PROMOTER, "lista")
    assert "1) Galletas 200g" in chat.say(PROMOTER, "9")
    # "no" en la cantidad regresa a la lista
    chat.say(PROMOTER, "2")
    assert "Ventas" in chat.say(PROMOTER, "no")


def test_sales_capture(chat, bot, sheets):
    start_visit(chat)
    chat.say(PROMOTER, "2")
    assert "se vendieron" in chat.say(PROMOTER, "2")
    chat.say(PROMOTER, "3")

    assert sheets.rows("VENTAS")[0][5:] == ["PR3", "3"]
    assert sheets.rows("INVENTARIO") == []
    assert bot.points.summary(PROMOTER).operacion == 1


def test_competitor_activity(chat, bot, sheets):
    start_visit(chat)

    text = chat.say(PROMOTER, "3")
    assert "1) Competidor X" in text
    assert "2) Competidor Y" in text

    text = chat.say(PROMOTER, "1")
    assert "1) Degustación" in text
    assert "2) Precio bajo" in text

    text = chat.say(PROMOTER, "1")
    assert "Competidor X* – Degustación" in text
    assert "Ganaste *2 puntos*" in text
    assert chat.state(PROMOTER) == STATE_OPER_VISITA

    # Actividad sin puntos: se registra pero no suma
    chat.say(PROMOTER, "3")
    chat.say(PROMOTER, "1")
    assert "Ganaste" not in chat.say(PROMOTER, "2")

    rows = sheets.rows("COMPETENCIA")
    assert [r[5:] for r in rows] == [
        ["AC1", "Competidor X", "Degustación", "2"],
        ["AC2", "Competidor X", "Precio bajo", "0"],
    ]
    assert bot.points.summary(PROMOTER).operacion == 2


def test_exhibition_photo_returns_to_visit(chat, bot, sheets):
    start_visit(chat)

    assert "foto" in chat.say(PROMOTER, "4")
    assert "Necesito que me envíes una *foto* para la auditoría" in chat.say(PROMOTER, "aquí va")

    text = chat.say(PROMOTER, media_url=EXHIBITION_PHOTO)
    assert "Resultado EVIDENCIA+ (demo)" in text
    assert "Visita en Walmart Centro" in text
    assert chat.state(PROMOTER) == STATE_OPER_VISITA

    evidence = sheets.rows("EVIDENCIAS")[0]
    assert evidence[3:5] == ["FOTO_EXHIBICION", "VISITA"]
    assert evidence[6] == sheets.rows("VISITAS")[0][0]
    assert evidence[7] == EXHIBITION_PHOTO
    assert bot.points.summary(PROMOTER).operacion == 3


def test_close_visit(chat, sheets):
    start_visit(chat)

    assert "¿Cerrar la visita" in chat.say(PROMOTER, "5")
    assert "¿Cerrar la visita" in chat.say(PROMOTER, "tal vez")

    text = chat.say(PROMOTER, "sí")
    assert "Visita cerrada en *Walmart Centro (CDMX)*" in text
    assert chat.state(PROMOTER) == STATE_MENU
    assert sheets.rows("VISITAS")[0][5] != ""

    # Sin visita abierta se inicia una nueva
    chat.say(PROMOTER, "2")
    chat.say(PROMOTER, "1")
    chat.say(PROMOTER, "1")
    assert len(sheets.rows("VISITAS")) == 2


def test_open_visit_is_resumed(chat, sheets):
    start_visit(chat)
    chat.say(PROMOTER, "menu")

    assert "Tienes una visita abierta en *Walmart Centro (CDMX)*" in chat.say(PROMOTER, "2")
    assert "Visita en Walmart Centro" in chat.say(PROMOTER, "1")
    assert len(sheets.rows("VISITAS")) == 1
