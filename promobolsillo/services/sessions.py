import json
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, List, Optional

from promobolsillo.logger_utils import logger
from promobolsillo.models import SHEET_SESSIONS
from promobolsillo.sheets_utils import cell, same_phone, sheet_range, sheet_row_number
from promobolsillo.states import (
    KNOWN_STATES,
    STATE_MENU,
    InvalidSessionData,
    NoData,
    dump_data,
    load_data,
    validate_transition,
)
from promobolsillo.time_utils import now, now_iso, parse_iso

# SESIONES: A telefono, B estado_actual, C data_json, D actualizado
WIDTH = 4


@dataclass
class Session:
    phone: str
    state: str = STATE_MENU
    data: Any = field(default_factory=NoData)
    row_number: int = 0
    updated_at: str = ""
    # True si al cargar se descartó el estado guardado (expiró o traía datos inválidos)
    reset: bool = False


class SessionStore:
    """Una fila por teléfono en la hoja SESIONES."""

    def __init__(self, sheets, ttl_hours: int = 24):
        self.sheets = sheets
        self.ttl = timedelta(hours=ttl_hours) if ttl_hours and ttl_hours > 0 else None

    def _find(self, phone: str) -> Optional[Session]:
        rows: List[List[str]] = self.sheets.get_values(sheet_range(SHEET_SESSIONS, 0, WIDTH - 1))
        for i, r in enumerate(rows):
            if not same_phone(cell(r, 0), phone):
                continue
            session = Session(
                phone=phone,
                state=cell(r, 1) or STATE_MENU,
                row_number=sheet_row_number(i),
                updated_at=cell(r, 3),
            )
            session.data = self._parse_data(session, cell(r, 2))
            return session
        return None

    def _parse_data(self, session: Session, raw: str):
        if session.state not in KNOWN_STATES:
            # Lo resuelve el despachador con un mensaje de "reinicié tu sesión"
            return NoData()
        try:
            return load_data(session.state, json.loads(raw) if raw else {})
        except (ValueError, InvalidSessionData) as e:
            logger.warning(f"Sesión de {session.phone} con datos inválidos en {session.state}: {e}")
            session.state = STATE_MENU
            session.reset = True
            return NoData()

    def _expired(self, session: Session) -> bool:
        if self.ttl is None or not session.updated_at:
            return False
        updated = parse_iso(session.updated_at)
        if updated is None or updated.tzinfo is None:
            return False
        return now() - updated > self.ttl

    def load(self, phone: str) -> Session:
        session = self._find(phone)
        if session is None:
            self.sheets.append_values(
                sheet_range(SHEET_SESSIONS, 0, WIDTH - 1),
                [[phone, STATE_MENU, "{}", now_iso()]],
            )
            session = self._find(phone) or Session(phone=phone)
            logger.info(f"Nueva sesión para {phone}")
            return session

        if self._expired(session) and session.state != STATE_MENU:
            logger.info(f"Sesión de {phone} expirada en {session.state}; vuelve al menú")
            session.state = STATE_MENU
            session.data = NoData()
            session.reset = True
        return session

    def save(self, session: Session, state: str, data=None) -> None:
        data = data if data is not None else NoData()
        validate_transition(state, data)
        values = [[session.phone, state, json.dumps(dump_data(data), ensure_ascii=False), now_iso()]]
        if session.row_number:
            self.sheets.update_values(
                sheet_range(SHEET_SESSIONS, 0, WIDTH - 1, row=session.row_number), values
            )
        else:
            self.sheets.append_values(sheet_range(SHEET_SESSIONS, 0, WIDTH - 1), values)
        session.state = state
        session.data = data
