"""
Modo supervisor: fotos del día por promotor o por riesgo, asistencia del equipo,
resumen de evidencias de marca y reenvío de fotos a grupos de cliente.
"""

import re

from promobolsillo.messages import Outcome, parse_choice, reply
from promobolsillo.services import summaries
from promobolsillo.sheets_utils import phones_match
from promobolsillo.states import (
    PHOTOS_BY_PROMOTER,
    PHOTOS_BY_RISK,
    STATE_MENU,
    STATE_SUP_ASISTENCIA,
    STATE_SUP_FOTOS,
    STATE_SUP_GRUPO,
    STATE_SUP_MENU,
    STATE_SUP_PROMOTORES,
    GroupPick,
    PhotoList,
    PromoterPick,
)
from promobolsillo.templates import (
    TEMPLATES,
    evidence_detail,
    group_options,
    numbered,
    option_list,
    promoter_attendance_history,
    supervisor_menu,
)

VER_RE = re.compile(r"^ver\s+(\d+)$")
ENVIAR_RE = re.compile(r"^enviar\s+(\d+)$")
ENVIAR_TODAS = "enviar todas"
CANCEL = {"cancelar", "no"}


def _team_names(bot, supervisor_phone: str, phones):
    names = {p.phone: p.name for p in bot.catalog.get_team(supervisor_phone)}
    return [names.get(phone) or phone for phone in phones]


def _team_evidence_today(bot, team):
    return [
        ev for ev in bot.evidence.today()
        if any(phones_match(p.phone, ev.phone) for p in team)
    ]


def _promoter_name(team, phone: str) -> str:
    for p in team:
        if phones_match(p.phone, phone):
            return p.name or phone
    return phone


def _photo_list(evidence, lines, mode: str, header: str, promoter_name: str = ""):
    msg = header + "\n\n" + numbered(lines) + TEMPLATES["supervisor"]["photo_commands"].format(n=1)
    data = PhotoList(mode=mode, evidence_ids=[ev.evidence_id for ev in evidence], promoter_name=promoter_name)
    return reply(msg, STATE_SUP_FOTOS, data)


# ==========================
# Menú
# ==========================

def _photos_by_promoter(bot, session, supervisor, team):
    counts = summaries.count_by_phone(bot.evidence.today(), [p.phone for p in team])
    lines = [f"{p.name} – {counts[p.phone]} foto(s)" for p in team]
    msg = (
        "👀 *Fotos de hoy por promotor*\n\n"
        + numbered(lines)
        + "\nResponde con el *número* del promotor para ver el detalle.\n"
        + "O escribe *menu* para volver."
    )
    return reply(msg, STATE_SUP_PROMOTORES, PromoterPick(promoter_phones=[p.phone for p in team]))


def _risky_photos(bot, session, supervisor, team):
    evidence = summaries.risky(_team_evidence_today(bot, team))
    if not evidence:
        return reply(TEMPLATES["supervisor"]["no_risky"])
    lines = [f"{ev.label} – {_promoter_name(team, ev.phone)} – riesgo {ev.risk}" for ev in evidence]
    return _photo_list(evidence, lines, PHOTOS_BY_RISK, "🧠📸 *Fotos de hoy con riesgo MEDIO/ALTO*")


def _team_attendance(bot, session, supervisor, team):
    stats = summaries.attendance_by_phone(bot.attendance.shifts(), [p.phone for p in team])
    lines = []
    for p in team:
        line = f"{p.name} – {stats[p.phone].total} jornada(s)"
        if stats[p.phone].last_date:
            line += f" (última: {stats[p.phone].last_date})"
        lines.append(line)
    msg = (
        "🕒 *Asistencia de tu equipo (últimas jornadas)*\n\n"
        + numbered(lines)
        + "\nResponde con el *número* del promotor para ver el detalle de sus asistencias,\n"
        + "o escribe *menu* para volver."
    )
    return reply(msg, STATE_SUP_ASISTENCIA, PromoterPick(promoter_phones=[p.phone for p in team]))


def _brand_digest(bot, session, supervisor, team):
    evidence = [ev for ev in _team_evidence_today(bot, team) if ev.brand_id]
    if not evidence:
        return reply(TEMPLATES["supervisor"]["no_brand_evidence"])

    visits = bot.attendance.visits()
    stores = bot.catalog.stores()
    brands = bot.catalog.brands()

    msg = "🏷️ *Evidencias de marca de hoy*\n\n"
    for store, brand, n in summaries.group_by_store_brand(evidence, visits, stores, brands):
        msg += f"• {store} – {brand}: {n} foto(s)\n"
    msg += "\n👥 *Por promotor*\n"
    for promoter, store, brand, n in summaries.group_by_promoter_store_brand(evidence, visits, stores, brands, team):
        msg += f"• {promoter} – {store} – {brand}: {n}\n"
    msg += "\nEscribe *menu* para volver al menú de supervisor."
    return reply(msg)


TEAM_OPTIONS = {
    "1": _photos_by_promoter,
    "2": _risky_photos,
    "3": _team_attendance,
    "4": _brand_digest,
}


def _handle_menu(bot, session, msg, supervisor):
    cmd = msg.command
    if cmd in TEAM_OPTIONS:
        team = bot.catalog.get_team(msg.phone)
        if not team:
            return reply(TEMPLATES["supervisor"]["no_team"])
        return TEAM_OPTIONS[cmd](bot, session, supervisor, team)
    if cmd == "5":
        return reply(TEMPLATES["supervisor"]["back_to_promoter"], STATE_MENU)
    return reply(supervisor_menu(supervisor))


# ==========================
# Listas de promotores
# ==========================

def _pick_promoter(bot, session, msg):
    data: PromoterPick = session.data
    n = parse_choice(msg.command, len(data.promoter_phones))
    if n is None:
        names = _team_names(bot, msg.phone, data.promoter_phones)
        return None, reply(option_list("Elige un número válido de promotor:", names))
    phone = data.promoter_phones[n - 1]
    return phone, None


def _handle_promoter_photos(bot, session, msg, supervisor):
    phone, invalid = _pick_promoter(bot, session, msg)
    if invalid:
        return invalid

    name = _team_names(bot, msg.phone, [phone])[0]
    evidence = summaries.for_phone(bot.evidence.today(), phone)
    if not evidence:
        return reply(TEMPLATES["supervisor"]["no_photos_promoter"].format(name=name), STATE_SUP_MENU)
    lines = [f"{ev.label} – riesgo {ev.risk}" for ev in evidence]
    return _photo_list(evidence, lines, PHOTOS_BY_PROMOTER, f"📷 *Fotos de hoy de {name}*", name)


def _handle_promoter_attendance(bot, session, msg, supervisor):
    phone, invalid = _pick_promoter(bot, session, msg)
    if invalid:
        return invalid

    name = _team_names(bot, msg.phone, [phone])[0]
    shifts = summaries.shifts_for_phone(bot.attendance.shifts(), phone)
    if not shifts:
        return reply(TEMPLATES["supervisor"]["no_attendance"].format(name=name))
    return reply(promoter_attendance_history(name, shifts))


# ==========================
# Fotos: ver / enviar
# ==========================

def _ask_group(bot, evidence_ids):
    groups = bot.catalog.get_active_client_groups()
    if not groups:
        return reply(TEMPLATES["supervisor"]["no_groups"])
    msg = option_list(
        "📤 *Enviar foto al cliente*\n\n¿A qué grupo quieres enviarla?",
        group_options(groups),
        "\nResponde con el *número* del grupo o escribe *menu* para cancelar.",
    )
    return reply(msg, STATE_SUP_GRUPO, GroupPick(evidence_ids=evidence_ids, group_ids=[g.group_id for g in groups]))


def _handle_photos(bot, session, msg, supervisor):
    data: PhotoList = session.data
    cmd = msg.command

    if cmd == ENVIAR_TODAS:
        if not data.evidence_ids:
            return reply(TEMPLATES["supervisor"]["invalid_number"])
        return _ask_group(bot, list(data.evidence_ids))

    match = VER_RE.match(cmd) or ENVIAR_RE.match(cmd)
    if not match:
        return reply(TEMPLATES["supervisor"]["not_understood"])

    n = parse_choice(match.group(1), len(data.evidence_ids))
    evidence = bot.evidence.get(data.evidence_ids[n - 1]) if n else None
    if evidence is None:
        return reply(TEMPLATES["supervisor"]["invalid_number"])

    if cmd.startswith("ver"):
        name = data.promoter_name or _promoter_name(bot.catalog.get_team(msg.phone), evidence.phone)
        return reply(evidence_detail(n, evidence, name), media_url=evidence.photo_url or None)
    return _ask_group(bot, [evidence.evidence_id])


def _handle_group(bot, session, msg, supervisor):
    data: GroupPick = session.data
    cmd = msg.command
    if cmd in CANCEL:
        return reply(supervisor_menu(supervisor), STATE_SUP_MENU)

    groups = {g.group_id: g for g in bot.catalog.get_active_client_groups()}
    n = parse_choice(cmd, len(data.group_ids))
    if n is None:
        options = group_options([groups[gid] for gid in data.group_ids if gid in groups])
        return reply(option_list(
            "⚠️ Número inválido. Elige uno de los siguientes grupos:",
            options,
            "\nO escribe *menu* para cancelar.",
        ))

    group = groups.get(data.group_ids[n - 1])
    if group is None:
        return reply(TEMPLATES["supervisor"]["no_groups"], STATE_SUP_MENU)

    evidence = bot.evidence.by_ids(data.evidence_ids)
    results = []
    for ev in evidence:
        results.extend(bot.notifier.forward(ev, group))

    sent = [r for r in results if r.ok]
    if not sent:
        return reply(TEMPLATES["supervisor"]["send_failed"], STATE_SUP_MENU)

    failed = sorted({r.destination for r in results if not r.ok})
    failed_line = f"⚠️ Falló el envío a: {', '.join(failed)}\n" if failed else ""
    text = TEMPLATES["supervisor"]["sent"].format(
        photos=len(evidence), group=group.name, sent=len(sent), failed=failed_line
    )
    return reply(text, STATE_SUP_MENU)


HANDLERS = {
    STATE_SUP_MENU: _handle_menu,
    STATE_SUP_PROMOTORES: _handle_promoter_photos,
    STATE_SUP_ASISTENCIA: _handle_promoter_attendance,
    STATE_SUP_FOTOS: _handle_photos,
    STATE_SUP_GRUPO: _handle_group,
}


def handle(bot, session, msg, supervisor) -> Outcome:
    if supervisor is None:
        return reply(TEMPLATES["supervisor"]["no_longer"], STATE_MENU)
    return HANDLERS[session.state](bot, session, msg, supervisor)
