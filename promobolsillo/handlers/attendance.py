"""Mi día de trabajo: entrada, comida y salida, cada una con foto + ubicación."""

from promobolsillo.messages import reply
from promobolsillo.models import (
    EVENT_CHECK_IN,
    EVENT_CHECK_OUT,
    EVENT_MEAL_OUT,
    EVENT_MEAL_RETURN,
    ORIGIN_SHIFT,
    POINTS_OPERATION,
)
from promobolsillo.states import (
    STATE_DIA_MENU,
    STATE_JORNADA_FOTO,
    STATE_JORNADA_UBICACION,
    STATE_MENU,
    LocationWait,
    PhotoWait,
)
from promobolsillo.templates import TEMPLATES, main_menu, shift_detail

STATES = {STATE_DIA_MENU, STATE_JORNADA_FOTO, STATE_JORNADA_UBICACION}

POINTS = {
    EVENT_CHECK_IN: 3,
    EVENT_MEAL_OUT: 2,
    EVENT_MEAL_RETURN: 2,
    EVENT_CHECK_OUT: 3,
}

# Origen del registro en PUNTOS; con el jornada_id queda único por jornada y evento
REASONS = {
    EVENT_CHECK_IN: "ENTRADA_JORNADA",
    EVENT_MEAL_OUT: "SALIDA_COMIDA",
    EVENT_MEAL_RETURN: "REGRESO_COMIDA",
    EVENT_CHECK_OUT: "SALIDA_JORNADA",
}

# Opciones del menú con jornada abierta
OPEN_SHIFT_OPTIONS = {
    "1": EVENT_MEAL_OUT,
    "2": EVENT_MEAL_RETURN,
    "3": EVENT_CHECK_OUT,
}


def _day_menu(shift) -> str:
    return TEMPLATES["dia"]["open_shift"] if shift else TEMPLATES["dia"]["no_shift"]


def enter(bot, session, msg):
    shift = bot.attendance.get_open_shift(msg.phone)
    return reply(_day_menu(shift), STATE_DIA_MENU)


def _ask_photo(shift_id: str, subtype: str):
    return reply(
        TEMPLATES["dia"]["ask_photo"][subtype],
        STATE_JORNADA_FOTO,
        PhotoWait(shift_id=shift_id, subtype=subtype),
    )


def _handle_menu(bot, session, msg):
    cmd = msg.command
    shift = bot.attendance.get_open_shift(msg.phone)

    if not shift:
        if cmd == "1":
            promoter = bot.catalog.get_promoter(msg.phone)
            shift_id = bot.attendance.open_shift(msg.phone, promoter.promoter_id if promoter else "")
            return _ask_photo(shift_id, EVENT_CHECK_IN)
        if cmd == "2":
            return reply(main_menu(), STATE_MENU)
        return reply(_day_menu(shift))

    if cmd in OPEN_SHIFT_OPTIONS:
        subtype = OPEN_SHIFT_OPTIONS[cmd]
        if subtype == EVENT_CHECK_OUT:
            bot.attendance.start_checkout(shift.shift_id)
        return _ask_photo(shift.shift_id, subtype)
    if cmd == "4":
        return reply(shift_detail(shift))
    if cmd == "5":
        return reply(main_menu(), STATE_MENU)
    return reply(_day_menu(shift))


def _handle_photo(bot, session, msg):
    data: PhotoWait = session.data
    if not msg.has_photo:
        return reply(TEMPLATES["dia"]["photo_missing"])

    if data.subtype == EVENT_CHECK_IN:
        bot.attendance.set_checkin_photo(data.shift_id, msg.media_url)
    elif data.subtype == EVENT_CHECK_OUT:
        bot.attendance.set_checkout_photo(data.shift_id, msg.media_url)

    return reply(
        TEMPLATES["dia"]["ask_location"],
        STATE_JORNADA_UBICACION,
        LocationWait(shift_id=data.shift_id, subtype=data.subtype, photo_url=msg.media_url),
    )


def _handle_location(bot, session, msg):
    """
    Acepta ubicación de WhatsApp (lat/lon) o una descripción del lugar en texto.
    Un mensaje sin ninguna de las dos vuelve a pedir la ubicación sin escribir nada.
    """
    data: LocationWait = session.data
    if not msg.has_location and not msg.text:
        return reply(TEMPLATES["dia"]["location_missing"])

    lat, lon = (msg.latitude, msg.longitude) if msg.has_location else ("", "")
    description = "" if msg.has_location else msg.text

    if data.subtype not in POINTS:
        return reply(_day_menu(bot.attendance.get_open_shift(msg.phone)), STATE_DIA_MENU)

    if data.subtype == EVENT_CHECK_OUT:
        if not bot.attendance.close_shift(data.shift_id, lat, lon):
            return reply(TEMPLATES["dia"]["already_closed"], STATE_DIA_MENU)
    elif data.subtype == EVENT_CHECK_IN:
        bot.attendance.set_checkin_location(data.shift_id, lat, lon)

    bot.evidence.register(
        msg.phone,
        data.subtype,
        ORIGIN_SHIFT,
        shift_id=data.shift_id,
        photo_url=data.photo_url,
        lat=lat,
        lon=lon,
        description=description,
    )

    points = POINTS[data.subtype]
    reason = f"{REASONS[data.subtype]}_{data.shift_id}"
    if not bot.points.award_once(msg.phone, POINTS_OPERATION, reason, points):
        return reply(TEMPLATES["dia"]["done_no_points"], STATE_DIA_MENU)
    return reply(TEMPLATES["dia"]["done"][data.subtype].format(points=points), STATE_DIA_MENU)


HANDLERS = {
    STATE_DIA_MENU: _handle_menu,
    STATE_JORNADA_FOTO: _handle_photo,
    STATE_JORNADA_UBICACION: _handle_location,
}


def handle(bot, session, msg):
    return HANDLERS[session.state](bot, session, msg)
