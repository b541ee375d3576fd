"""
Operación en tienda: visita a una tienda con captura de inventario, ventas,
actividad de competencia y foto de exhibición.
"""

from promobolsillo.messages import parse_choice, reply
from promobolsillo.models import POINTS_OPERATION
from promobolsillo.states import (
    MODE_EXHIBITION,
    MODE_INVENTORY,
    MODE_SALES,
    STATE_EVIDENCIA_FOTO,
    STATE_MENU,
    STATE_OPER_ACTIVIDAD,
    STATE_OPER_CANTIDAD,
    STATE_OPER_CERRAR,
    STATE_OPER_COMPETIDOR,
    STATE_OPER_MENU,
    STATE_OPER_PRODUCTO,
    STATE_OPER_TIENDA,
    STATE_OPER_VISITA,
    ActivityPick,
    AuditPhotoWait,
    CompetitorPick,
    ProductLoop,
    QuantityWait,
    StorePick,
    VisitContext,
)
from promobolsillo.templates import TEMPLATES, main_menu, option_list

STATES = {
    STATE_OPER_MENU,
    STATE_OPER_TIENDA,
    STATE_OPER_VISITA,
    STATE_OPER_PRODUCTO,
    STATE_OPER_CANTIDAD,
    STATE_OPER_COMPETIDOR,
    STATE_OPER_ACTIVIDAD,
    STATE_OPER_CERRAR,
}

CONFIRM = {"s", "si", "sí"}

# Puntos por producto capturado (una vez por visita, producto y modo)
QUANTITY_POINTS = 1

PRODUCT_FOOTER = (
    "\nResponde con el *número* del producto, *lista* para ver de nuevo "
    "o *no* para terminar."
)


def _store_label(bot, store_id: str) -> str:
    store = bot.catalog.get_store(store_id)
    return store.label if store else store_id


def visit_menu(bot, visit_id: str, store_id: str, prefix: str = ""):
    text = prefix + TEMPLATES["operacion"]["visit_menu"].format(store=_store_label(bot, store_id))
    return reply(text, STATE_OPER_VISITA, VisitContext(visit_id=visit_id, store_id=store_id))


def enter(bot, session, msg):
    visit = bot.attendance.get_open_visit(msg.phone)
    if visit:
        text = TEMPLATES["operacion"]["menu_open_visit"].format(store=_store_label(bot, visit.store_id))
    else:
        text = TEMPLATES["operacion"]["menu"]
    return reply(text, STATE_OPER_MENU)


def _store_list(bot, store_ids, prefix: str = ""):
    labels = [_store_label(bot, sid) for sid in store_ids]
    return reply(prefix + option_list("🏬 *¿En qué tienda estás?*", labels), STATE_OPER_TIENDA, StorePick(store_ids))


def _handle_menu(bot, session, msg):
    cmd = msg.command
    if cmd == "1":
        visit = bot.attendance.get_open_visit(msg.phone)
        if visit:
            return visit_menu(bot, visit.visit_id, visit.store_id)
        promoter = bot.catalog.get_promoter(msg.phone)
        stores = bot.catalog.get_stores_for_promoter(promoter)
        if not stores:
            return reply(TEMPLATES["operacion"]["no_stores"] + "\n\n" + main_menu(), STATE_MENU)
        return _store_list(bot, [s.store_id for s in stores])
    if cmd == "2":
        return reply(main_menu(), STATE_MENU)
    return enter(bot, session, msg)


def _handle_store(bot, session, msg):
    data: StorePick = session.data
    n = parse_choice(msg.command, len(data.store_ids))
    if n is None:
        return _store_list(bot, data.store_ids, "Elige un número válido de tienda:\n\n")

    store_id = data.store_ids[n - 1]
    promoter = bot.catalog.get_promoter(msg.phone)
    visit = bot.attendance.start_visit(msg.phone, promoter.promoter_id if promoter else "", store_id)
    return visit_menu(bot, visit.visit_id, visit.store_id, "✅ Visita iniciada.\n\n")


def _product_list(bot, data: ProductLoop, prefix: str = ""):
    names = []
    for pid in data.product_ids:
        product = bot.catalog.get_product(pid)
        names.append(product.name if product else pid)
    header = "📦 *Inventario*" if data.mode == MODE_INVENTORY else "💵 *Ventas*"
    return reply(prefix + option_list(header, names, PRODUCT_FOOTER), STATE_OPER_PRODUCTO, data)


def _handle_visit(bot, session, msg):
    data: VisitContext = session.data
    cmd = msg.command

    if cmd in ("1", "2"):
        products = bot.catalog.get_focus_products()
        if not products:
            return visit_menu(bot, data.visit_id, data.store_id, TEMPLATES["operacion"]["no_products"] + "\n\n")
        loop = ProductLoop(
            visit_id=data.visit_id,
            store_id=data.store_id,
            mode=MODE_INVENTORY if cmd == "1" else MODE_SALES,
            product_ids=[p.product_id for p in products],
        )
        return _product_list(bot, loop)

    if cmd == "3":
        competitors = bot.catalog.get_competitors()
        if not competitors:
            return visit_menu(bot, data.visit_id, data.store_id, TEMPLATES["operacion"]["no_competitors"] + "\n\n")
        return reply(
            option_list("🕵️ *¿Qué competidor observaste?*", competitors),
            STATE_OPER_COMPETIDOR,
            CompetitorPick(visit_id=data.visit_id, store_id=data.store_id, competitors=competitors),
        )

    if cmd == "4":
        return reply(
            TEMPLATES["evidencias"]["audit_ask_photo"],
            STATE_EVIDENCIA_FOTO,
            AuditPhotoWait(mode=MODE_EXHIBITION, visit_id=data.visit_id),
        )

    if cmd == "5":
        return reply(
            TEMPLATES["operacion"]["confirm_close"].format(store=_store_label(bot, data.store_id)),
            STATE_OPER_CERRAR,
            data,
        )

    if cmd == "6":
        return reply(main_menu(), STATE_MENU)

    return visit_menu(bot, data.visit_id, data.store_id)


def _handle_product(bot, session, msg):
    data: ProductLoop = session.data
    cmd = msg.command
    if cmd == "no":
        return visit_menu(bot, data.visit_id, data.store_id, TEMPLATES["operacion"]["loop_done"])

    n = parse_choice(cmd, len(data.product_ids))
    if n is None:
        return _product_list(bot, data)

    product_id = data.product_ids[n - 1]
    product = bot.catalog.get_product(product_id)
    return reply(
        TEMPLATES["operacion"]["ask_quantity"][data.mode].format(product=product.name if product else product_id),
        STATE_OPER_CANTIDAD,
        QuantityWait(
            visit_id=data.visit_id,
            store_id=data.store_id,
            mode=data.mode,
            product_ids=data.product_ids,
            product_id=product_id,
        ),
    )


def _handle_quantity(bot, session, msg):
    data: QuantityWait = session.data
    loop = ProductLoop(
        visit_id=data.visit_id,
        store_id=data.store_id,
        mode=data.mode,
        product_ids=data.product_ids,
    )
    cmd = msg.command
    if cmd == "no":
        return _product_list(bot, loop)
    if not cmd.isdecimal():
        return reply(TEMPLATES["operacion"]["bad_quantity"])

    quantity = int(cmd)
    if data.mode == MODE_INVENTORY:
        bot.attendance.record_inventory(msg.phone, data.visit_id, data.store_id, data.product_id, quantity)
    else:
        bot.attendance.record_sale(msg.phone, data.visit_id, data.store_id, data.product_id, quantity)
    bot.points.award_once(
        msg.phone, POINTS_OPERATION, f"{data.mode}_{data.visit_id}_{data.product_id}", QUANTITY_POINTS
    )

    product = bot.catalog.get_product(data.product_id)
    saved = TEMPLATES["operacion"]["quantity_saved"].format(
        product=product.name if product else data.product_id, quantity=quantity
    )
    return _product_list(bot, loop, saved)


def _handle_competitor(bot, session, msg):
    data: CompetitorPick = session.data
    n = parse_choice(msg.command, len(data.competitors))
    if n is None:
        return reply(option_list("Elige un número válido de competidor:", data.competitors))

    competitor = data.competitors[n - 1]
    activities = bot.catalog.get_competitor_activities(competitor)
    if not activities:
        return visit_menu(bot, data.visit_id, data.store_id, TEMPLATES["operacion"]["no_competitors"] + "\n\n")
    return reply(
        option_list(f"🕵️ *{competitor}*: ¿qué actividad observaste?", [a.activity_type for a in activities]),
        STATE_OPER_ACTIVIDAD,
        ActivityPick(
            visit_id=data.visit_id,
            store_id=data.store_id,
            competitor=competitor,
            activity_ids=[a.activity_id for a in activities],
        ),
    )


def _handle_activity(bot, session, msg):
    data: ActivityPick = session.data
    by_id = {a.activity_id: a for a in bot.catalog.competitor_activities()}
    activities = [by_id[aid] for aid in data.activity_ids if aid in by_id]

    n = parse_choice(msg.command, len(activities))
    if n is None:
        return reply(option_list("Elige un número válido de actividad:", [a.activity_type for a in activities]))

    activity = activities[n - 1]
    bot.attendance.record_competitor_activity(msg.phone, data.visit_id, data.store_id, activity)

    awarded = activity.points > 0 and bot.points.award_once(
        msg.phone, POINTS_OPERATION, f"COMPETENCIA_{data.visit_id}_{activity.activity_id}", activity.points
    )
    key = "competition_saved" if awarded else "competition_saved_no_points"
    prefix = TEMPLATES["operacion"][key].format(
        competitor=activity.competitor, activity=activity.activity_type, points=activity.points
    )
    return visit_menu(bot, data.visit_id, data.store_id, prefix)


def _handle_close(bot, session, msg):
    data: VisitContext = session.data
    cmd = msg.command
    if cmd in CONFIRM:
        bot.attendance.close_visit(data.visit_id)
        text = TEMPLATES["operacion"]["visit_closed"].format(store=_store_label(bot, data.store_id))
        return reply(text + main_menu(), STATE_MENU)
    if cmd == "no":
        return visit_menu(bot, data.visit_id, data.store_id)
    return reply(TEMPLATES["operacion"]["confirm_close"].format(store=_store_label(bot, data.store_id)))


HANDLERS = {
    STATE_OPER_MENU: _handle_menu,
    STATE_OPER_TIENDA: _handle_store,
    STATE_OPER_VISITA: _handle_visit,
    STATE_OPER_PRODUCTO: _handle_product,
    STATE_OPER_CANTIDAD: _handle_quantity,
    STATE_OPER_COMPETIDOR: _handle_competitor,
    STATE_OPER_ACTIVIDAD: _handle_activity,
    STATE_OPER_CERRAR: _handle_close,
}


def handle(bot, session, msg):
    return HANDLERS[session.state](bot, session, msg)
