"""
Evidencias de marca (marca → tipo → producto → foto → comentario) y auditoría de
fotos directa o de exhibición dentro de una visita.
"""

from promobolsillo.handlers.operation import visit_menu
from promobolsillo.messages import parse_choice, reply
from promobolsillo.models import (
    EVENT_BRAND,
    EVENT_DIRECT_AUDIT,
    EVENT_EXHIBITION,
    ORIGIN_BRAND,
    ORIGIN_DIRECT,
    ORIGIN_VISIT,
    POINTS_OPERATION,
)
from promobolsillo.services.catalog import MAX_OPTIONS
from promobolsillo.services.ledger import (
    SUBTYPE_EXTRA_DISPLAY,
    SUBTYPE_OUT_OF_STOCK,
    SUBTYPE_POP,
    SUBTYPE_PRICE,
    SUBTYPE_SHELF,
)
from promobolsillo.states import (
    MODE_EXHIBITION,
    STATE_EVID_DESCRIPCION,
    STATE_EVID_FOTO,
    STATE_EVID_MARCA,
    STATE_EVID_PRODUCTO,
    STATE_EVID_TIPO,
    STATE_EVIDENCIA_FOTO,
    STATE_MENU,
    AuditPhotoWait,
    BrandPick,
    EvidenceDescriptionWait,
    EvidencePhotoWait,
    EvidenceProductPick,
    EvidenceTypePick,
)
from promobolsillo.templates import TEMPLATES, evidence_result, main_menu, option_list

STATES = {
    STATE_EVID_MARCA,
    STATE_EVID_TIPO,
    STATE_EVID_PRODUCTO,
    STATE_EVID_FOTO,
    STATE_EVID_DESCRIPCION,
    STATE_EVIDENCIA_FOTO,
}

# Mismo orden que el menú "pick_type"
SUBTYPES = [SUBTYPE_SHELF, SUBTYPE_EXTRA_DISPLAY, SUBTYPE_PRICE, SUBTYPE_POP, SUBTYPE_OUT_OF_STOCK]

EVIDENCE_POINTS = 3

PRODUCT_FOOTER = (
    "\nResponde con el *número* del producto, escribe el *código de barras* "
    "o *no* si la evidencia no es de un producto en particular."
)


def _brand_name(bot, brand_id: str) -> str:
    brand = bot.catalog.get_brand(brand_id)
    return brand.name if brand else brand_id


def _product_name(bot, product_id: str) -> str:
    product = bot.catalog.get_product(product_id)
    return product.name if product else product_id


def _award(bot, phone: str, evidence) -> int:
    bot.points.add_points(phone, POINTS_OPERATION, f"EVIDENCIA_{evidence.evidence_id}", EVIDENCE_POINTS)
    return EVIDENCE_POINTS


# ==========================
# Auditoría de fotos
# ==========================

def audit_photo(bot, msg, mode: str, visit_id: str = ""):
    """Registra una foto de auditoría (directa o de exhibición) y regresa el resultado demo."""
    if mode == MODE_EXHIBITION:
        event_type, origin = EVENT_EXHIBITION, ORIGIN_VISIT
    else:
        event_type, origin = EVENT_DIRECT_AUDIT, ORIGIN_DIRECT

    shift = bot.attendance.get_open_shift(msg.phone)
    evidence = bot.evidence.register(
        msg.phone,
        event_type,
        origin,
        shift_id=shift.shift_id if shift else "",
        visit_id=visit_id,
        photo_url=msg.media_url,
        lat=msg.latitude,
        lon=msg.longitude,
    )
    result = evidence_result(evidence, _award(bot, msg.phone, evidence))

    visit = bot.attendance.get_visit(visit_id) if visit_id else None
    if visit and not visit.end_time:
        return visit_menu(bot, visit.visit_id, visit.store_id, result + "\n\n")
    return reply(result, STATE_MENU)


def _handle_audit_photo(bot, session, msg):
    data: AuditPhotoWait = session.data
    if not msg.has_photo:
        return reply(TEMPLATES["evidencias"]["audit_photo_missing"])
    return audit_photo(bot, msg, data.mode, data.visit_id)


# ==========================
# Evidencias de marca
# ==========================

def _brand_list(bot, data: BrandPick, prefix: str = ""):
    names = [_brand_name(bot, bid) for bid in data.brand_ids]
    return reply(prefix + option_list("🏷️ *¿De qué marca es la evidencia?*", names), STATE_EVID_MARCA, data)


def enter(bot, session, msg):
    visit = bot.attendance.get_open_visit(msg.phone)
    brands = bot.catalog.get_brands_for_store(visit.store_id if visit else "")[:MAX_OPTIONS]
    if not brands:
        return reply(TEMPLATES["evidencias"]["no_brands"] + "\n\n" + main_menu(), STATE_MENU)
    data = BrandPick(brand_ids=[b.brand_id for b in brands], visit_id=visit.visit_id if visit else "")
    return _brand_list(bot, data)


def _handle_brand(bot, session, msg):
    data: BrandPick = session.data
    n = parse_choice(msg.command, len(data.brand_ids))
    if n is None:
        return _brand_list(bot, data, "Elige un número válido de marca:\n\n")
    brand_id = data.brand_ids[n - 1]
    return reply(
        TEMPLATES["evidencias"]["pick_type"].format(brand=_brand_name(bot, brand_id)),
        STATE_EVID_TIPO,
        EvidenceTypePick(brand_id=brand_id, visit_id=data.visit_id),
    )


def _ask_photo(subtype: str, brand_id: str, product_id: str, visit_id: str, prefix: str = ""):
    return reply(
        prefix + TEMPLATES["evidencias"]["ask_photo"].format(label=subtype),
        STATE_EVID_FOTO,
        EvidencePhotoWait(brand_id=brand_id, subtype=subtype, product_id=product_id, visit_id=visit_id),
    )


def _product_list(bot, data: EvidenceProductPick, prefix: str = ""):
    names = [_product_name(bot, pid) for pid in data.product_ids]
    return reply(prefix + option_list("📦 *¿De qué producto?*", names, PRODUCT_FOOTER), STATE_EVID_PRODUCTO, data)


def _handle_type(bot, session, msg):
    data: EvidenceTypePick = session.data
    n = parse_choice(msg.command, len(SUBTYPES))
    if n is None:
        return reply(TEMPLATES["evidencias"]["pick_type"].format(brand=_brand_name(bot, data.brand_id)))

    subtype = SUBTYPES[n - 1]
    products = bot.catalog.get_products_for_brand(data.brand_id)
    if not products:
        return _ask_photo(subtype, data.brand_id, "", data.visit_id)
    pick = EvidenceProductPick(
        brand_id=data.brand_id,
        subtype=subtype,
        product_ids=[p.product_id for p in products],
        visit_id=data.visit_id,
    )
    return _product_list(bot, pick)


def _handle_product(bot, session, msg):
    data: EvidenceProductPick = session.data
    cmd = msg.command
    if cmd == "no":
        return _ask_photo(data.subtype, data.brand_id, "", data.visit_id)

    n = parse_choice(cmd, len(data.product_ids))
    if n is not None:
        product_id = data.product_ids[n - 1]
        return _ask_photo(data.subtype, data.brand_id, product_id, data.visit_id, f"📦 {_product_name(bot, product_id)}\n")

    product = bot.catalog.find_product_by_barcode(msg.text, data.brand_id)
    if product:
        return _ask_photo(data.subtype, data.brand_id, product.product_id, data.visit_id, f"📦 {product.name}\n")

    prefix = TEMPLATES["evidencias"]["product_not_found"].format(code=msg.text) if msg.text else ""
    return _product_list(bot, data, prefix)


def _handle_photo(bot, session, msg):
    data: EvidencePhotoWait = session.data
    if not msg.has_photo:
        return reply(TEMPLATES["evidencias"]["photo_missing"])
    return reply(
        TEMPLATES["evidencias"]["ask_description"],
        STATE_EVID_DESCRIPCION,
        EvidenceDescriptionWait(
            brand_id=data.brand_id,
            subtype=data.subtype,
            photo_url=msg.media_url,
            product_id=data.product_id,
            visit_id=data.visit_id,
            lat=msg.latitude,
            lon=msg.longitude,
        ),
    )


def _handle_description(bot, session, msg):
    data: EvidenceDescriptionWait = session.data
    if not msg.text:
        return reply(TEMPLATES["evidencias"]["ask_description"])
    description = "" if msg.command == "no" else msg.text

    shift = bot.attendance.get_open_shift(msg.phone)
    evidence = bot.evidence.register(
        msg.phone,
        EVENT_BRAND,
        ORIGIN_BRAND,
        shift_id=shift.shift_id if shift else "",
        visit_id=data.visit_id,
        photo_url=data.photo_url,
        lat=data.lat,
        lon=data.lon,
        brand_id=data.brand_id,
        product_id=data.product_id,
        subtype=data.subtype,
        description=description,
    )
    return reply(evidence_result(evidence, _award(bot, msg.phone, evidence)), STATE_MENU)


HANDLERS = {
    STATE_EVID_MARCA: _handle_brand,
    STATE_EVID_TIPO: _handle_type,
    STATE_EVID_PRODUCTO: _handle_product,
    STATE_EVID_FOTO: _handle_photo,
    STATE_EVID_DESCRIPCION: _handle_description,
    STATE_EVIDENCIA_FOTO: _handle_audit_photo,
}


def handle(bot, session, msg):
    return HANDLERS[session.state](bot, session, msg)
