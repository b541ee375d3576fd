from promobolsillo.handlers import academy, attendance, evidence, operation
from promobolsillo.messages import Outcome, ReplyMessage, reply
from promobolsillo.states import MODE_DIRECT_AUDIT, STATE_MENU
from promobolsillo.templates import (
    TEMPLATES,
    attendance_history,
    evidence_caption,
    evidence_line,
    main_menu,
)

STATES = {STATE_MENU}

# Fotos que se regresan junto con el listado de "mis evidencias de hoy"
MAX_PHOTOS = 5


def my_evidence_today(bot, phone: str) -> Outcome:
    items = bot.evidence.today_for(phone)
    if not items:
        return reply(TEMPLATES["evidencias"]["none_today"])

    listing = "📷 *Tus evidencias de hoy*\n\n"
    listing += "".join(evidence_line(i, ev) + "\n" for i, ev in enumerate(items, start=1))
    listing += "\nTe envío las primeras fotos para revisión rápida."

    replies = [ReplyMessage(listing)]
    for i, ev in enumerate(items[:MAX_PHOTOS], start=1):
        if ev.photo_url:
            replies.append(ReplyMessage(evidence_caption(i, ev), ev.photo_url))
    return Outcome(replies=replies)


OPTIONS = {
    "1": attendance.enter,
    "2": operation.enter,
    "3": evidence.enter,
    "4": academy.enter,
}


def handle(bot, session, msg):
    # Una foto en el menú principal es una auditoría directa
    if msg.has_photo:
        return evidence.audit_photo(bot, msg, MODE_DIRECT_AUDIT)

    cmd = msg.command
    if cmd in OPTIONS:
        return OPTIONS[cmd](bot, session, msg)
    if cmd == "5":
        return my_evidence_today(bot, msg.phone)
    if cmd == "6":
        return reply(attendance_history(bot.attendance.recent_shifts(msg.phone)))
    return reply(main_menu())
