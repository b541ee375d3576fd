"""
Despachador de la conversación.

Por cada mensaje: se carga la sesión del teléfono, se resuelven los comandos
globales (puntos / sup / menu), se delega al handler del estado actual y, al
final, se guarda la sesión una sola vez. Si el handler lanza una excepción la
sesión queda como estaba.
"""

from typing import List

from promobolsillo.handlers import academy, attendance, evidence, menu, operation, supervisor
from promobolsillo.logger_utils import logger
from promobolsillo.messages import InboundMessage, Outcome, ReplyMessage, reply
from promobolsillo.services.academy import Academy
from promobolsillo.services.attendance import Attendance
from promobolsillo.services.catalog import Catalog
from promobolsillo.services.ledger import EvidenceLedger, PointsLedger
from promobolsillo.services.notifier import EvidenceNotifier
from promobolsillo.services.sessions import SessionStore
from promobolsillo.states import STATE_MENU, STATE_SUP_MENU, SUP_STATES
from promobolsillo.templates import TEMPLATES, main_menu, points_summary, supervisor_menu

PROMOTER_HANDLERS = (menu, attendance, evidence, operation, academy)

ROUTES = {state: module.handle for module in PROMOTER_HANDLERS for state in module.STATES}

MENU_COMMANDS = {"menu", "inicio"}


class Bot:
    def __init__(self, sheets, twilio_client=None, from_number: str = "", session_ttl_hours: int = 24):
        self.sheets = sheets
        self.catalog = Catalog(sheets)
        self.sessions = SessionStore(sheets, ttl_hours=session_ttl_hours)
        self.points = PointsLedger(sheets)
        self.evidence = EvidenceLedger(sheets)
        self.attendance = Attendance(sheets)
        self.academy = Academy(sheets, self.catalog, self.points)
        self.notifier = EvidenceNotifier(twilio_client, from_number, self.catalog, self.attendance)

    def handle(self, msg: InboundMessage) -> List[ReplyMessage]:
        session = self.sessions.load(msg.phone)
        logger.info(
            f"Mensaje de {msg.phone} en {session.state}: {msg.text[:40]!r} (NumMedia: {msg.num_media})"
        )

        outcome = self.dispatch(session, msg)

        if outcome.state is not None:
            self.sessions.save(session, outcome.state, outcome.data)
        elif session.reset:
            self.sessions.save(session, session.state, session.data)
        return outcome.replies

    def dispatch(self, session, msg: InboundMessage) -> Outcome:
        cmd = msg.command
        sup = self.catalog.get_supervisor(msg.phone)
        in_supervisor_state = session.state in SUP_STATES

        if cmd == "puntos":
            return reply(points_summary(self.points.summary(msg.phone)))

        if cmd == "sup":
            if not sup:
                return reply(TEMPLATES["menu"]["not_supervisor"])
            return reply(supervisor_menu(sup), STATE_SUP_MENU)

        if cmd in MENU_COMMANDS:
            if sup and in_supervisor_state:
                return reply(supervisor_menu(sup), STATE_SUP_MENU)
            return reply(main_menu(), STATE_MENU)

        if in_supervisor_state:
            return supervisor.handle(self, session, msg, sup)

        handler = ROUTES.get(session.state)
        if handler is None:
            logger.warning(f"Estado desconocido {session.state!r} para {msg.phone}; se reinicia la sesión")
            return reply(TEMPLATES["menu"]["session_reset"] + main_menu(), STATE_MENU)
        return handler(self, session, msg)
