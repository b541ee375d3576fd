from conftest import PROMOTER, PROMOTER_2

from promobolsillo.models import POINTS_OPERATION, POINTS_TRAINING


def test_summary_by_category(bot):
    bot.points.add_points(PROMOTER, POINTS_OPERATION, "ENTRADA_JORNADA_J-1", 3)
    bot.points.add_points(PROMOTER, POINTS_OPERATION, "SALIDA_JORNADA_J-1", 3)
    bot.points.add_points(PROMOTER, POINTS_TRAINING, "RETO_R1", 5)
    bot.points.add_points(PROMOTER_2, POINTS_OPERATION, "ENTRADA_JORNADA_J-2", 3)

    summary = bot.points.summary(PROMOTER)

    assert summary.operacion == 6
    assert summary.capacitacion == 5
    assert summary.total == 11


def test_summary_accepts_phone_cell_stored_as_number(bot, sheets):
    sheets.seed("PUNTOS", [
        ["2025-01-01T10:00:00-06:00", "5215500000001", "operacion", "X", "4"],
        ["2025-01-01T10:00:00-06:00", "5500000001", "OPERACION", "Y", "9"],
    ])
    assert bot.points.summary(PROMOTER).operacion == 4


def test_points_of_a_phone_that_is_a_suffix_are_not_shared(bot):
    us_phone = "+15551234567"
    mx_phone = "+5215551234567"
    bot.points.add_points(us_phone, POINTS_OPERATION, "ENTRADA_JORNADA_J-1", 3)

    assert bot.points.summary(mx_phone).operacion == 0
    assert bot.points.award_once(mx_phone, POINTS_OPERATION, "ENTRADA_JORNADA_J-1", 3)


def test_award_once_skips_duplicate_reason(bot, sheets):
    assert bot.points.award_once(PROMOTER, POINTS_OPERATION, "SALIDA_COMIDA_J-1", 2)
    assert not bot.points.award_once(PROMOTER, POINTS_OPERATION, "SALIDA_COMIDA_J-1", 2)
    # El mismo origen para otro teléfono sí suma
    assert bot.points.award_once(PROMOTER_2, POINTS_OPERATION, "SALIDA_COMIDA_J-1", 2)

    assert len(sheets.rows("PUNTOS")) == 2
    assert bot.points.summary(PROMOTER).operacion == 2


def test_puntos_command_works_from_any_state(chat, bot):
    bot.points.add_points(PROMOTER, POINTS_OPERATION, "ENTRADA_JORNADA_J-1", 3)
    bot.points.add_points(PROMOTER, POINTS_TRAINING, "RETO_R1", 5)
    chat.say(PROMOTER, "menu")
    chat.say(PROMOTER, "2")

    text = chat.say(PROMOTER, "Puntos")

    assert "Operación: 3" in text
    assert "Capacitación: 5" in text
    assert "Total: 8" in text
    # No cambia el estado de la conversación
    assert chat.state(PROMOTER) == "OPER_MENU"
