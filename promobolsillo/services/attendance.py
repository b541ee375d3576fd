"""
JORNADAS (entrada / salida del día) y VISITAS a tienda, más las capturas de
inventario, ventas y competencia que se hacen dentro de una visita.

Las actualizaciones son en sitio por rango de celdas: la fila se localiza por
escaneo lineal del id y se traduce a la fila real de la hoja.
"""

from typing import List, Optional

from promobolsillo.logger_utils import logger
from promobolsillo.models import (
    SHEET_COMPETITION,
    SHEET_INVENTORY,
    SHEET_SALES,
    SHEET_SHIFTS,
    SHEET_VISITS,
    SHIFT_CLOSED,
    SHIFT_OPEN,
    CompetitorActivity,
    Shift,
    Visit,
)
from promobolsillo.sheets_utils import same_phone, sheet_range, sheet_row_number
from promobolsillo.time_utils import new_id, now_iso, today

# INVENTARIO / VENTAS: registro_id, fecha_hora, telefono, visita_id, tienda_id, producto_id, cantidad
QUANTITY_WIDTH = 7
# COMPETENCIA: registro_id, fecha_hora, telefono, visita_id, tienda_id, actividad_id, competidor, tipo_actividad, puntos
COMPETITION_WIDTH = 9


class Attendance:
    def __init__(self, sheets):
        self.sheets = sheets

    # ==========================
    # JORNADAS
    # ==========================

    def shifts(self) -> List[Shift]:
        rows = self.sheets.get_values(sheet_range(SHEET_SHIFTS, 0, Shift.WIDTH - 1))
        return [Shift.from_row(r, sheet_row_number(i)) for i, r in enumerate(rows) if r]

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        for s in self.shifts():
            if s.shift_id == shift_id:
                return s
        return None

    def get_open_shift(self, phone: str) -> Optional[Shift]:
        for s in self.shifts():
            if s.is_open and same_phone(s.phone, phone):
                return s
        return None

    def open_shift(self, phone: str, promoter_id: str = "", store_id: str = "") -> str:
        """Crea la jornada del día; si ya hay una abierta para el teléfono, devuelve esa."""
        existing = self.get_open_shift(phone)
        if existing:
            logger.info(f"{phone} ya tiene jornada abierta {existing.shift_id}; se reutiliza")
            return existing.shift_id

        shift = Shift(
            shift_id=new_id("J"),
            phone=phone,
            promoter_id=promoter_id,
            date=today(),
            check_in_time=now_iso(),
            status=SHIFT_OPEN,
            store_id=store_id,
        )
        self.sheets.append_values(sheet_range(SHEET_SHIFTS, 0, Shift.WIDTH - 1), [shift.to_row()])
        logger.info(f"Jornada {shift.shift_id} abierta para {phone}")
        return shift.shift_id

    def _update(self, shift_id: str, first_col: int, values: List) -> Optional[Shift]:
        shift = self.get_shift(shift_id)
        if not shift:
            logger.warning(f"Jornada {shift_id} no encontrada")
            return None
        range_ = sheet_range(SHEET_SHIFTS, first_col, first_col + len(values) - 1, row=shift.row_number)
        self.sheets.update_values(range_, [values])
        return shift

    def set_checkin_photo(self, shift_id: str, photo_url: str) -> None:
        self._update(shift_id, Shift.COL_CHECK_IN_PHOTO, [photo_url])

    def set_checkin_location(self, shift_id: str, lat: str, lon: str) -> None:
        self._update(shift_id, Shift.COL_CHECK_IN_LAT, [lat, lon])

    def start_checkout(self, shift_id: str) -> None:
        self._update(shift_id, Shift.COL_CHECK_OUT_TIME, [now_iso()])

    def set_checkout_photo(self, shift_id: str, photo_url: str) -> None:
        self._update(shift_id, Shift.COL_CHECK_OUT_PHOTO, [photo_url])

    def close_shift(self, shift_id: str, lat: str, lon: str) -> bool:
        """Guarda la ubicación de salida y cierra. False si la jornada ya estaba cerrada."""
        shift = self.get_shift(shift_id)
        if not shift or not shift.is_open:
            return False
        checkout_time = shift.check_out_time or now_iso()
        range_ = sheet_range(SHEET_SHIFTS, Shift.COL_CHECK_OUT_TIME, Shift.COL_CHECK_OUT_LAT + 1, row=shift.row_number)
        self.sheets.update_values(range_, [[checkout_time, lat, lon]])
        self.sheets.update_values(
            sheet_range(SHEET_SHIFTS, Shift.COL_STATUS, Shift.COL_STATUS, row=shift.row_number),
            [[SHIFT_CLOSED]],
        )
        logger.info(f"Jornada {shift_id} cerrada")
        return True

    def recent_shifts(self, phone: str, max_items: int = 10) -> List[Shift]:
        items = [s for s in self.shifts() if same_phone(s.phone, phone)]
        items.sort(key=lambda s: (s.date, s.check_in_time), reverse=True)
        return items[:max_items]

    # ==========================
    # VISITAS
    # ==========================

    def visits(self) -> List[Visit]:
        rows = self.sheets.get_values(sheet_range(SHEET_VISITS, 0, Visit.WIDTH - 1))
        return [Visit.from_row(r, sheet_row_number(i)) for i, r in enumerate(rows) if r]

    def get_visit(self, visit_id: str) -> Optional[Visit]:
        if not visit_id:
            return None
        for v in self.visits():
            if v.visit_id == visit_id:
                return v
        return None

    def get_open_visit(self, phone: str) -> Optional[Visit]:
        for v in self.visits():
            if not v.end_time and v.phone and same_phone(v.phone, phone):
                return v
        return None

    def start_visit(self, phone: str, promoter_id: str, store_id: str) -> Visit:
        existing = self.get_open_visit(phone)
        if existing:
            return existing
        visit = Visit(
            visit_id=new_id("V"),
            promoter_id=promoter_id,
            store_id=store_id,
            date=today(),
            start_time=now_iso(),
            phone=phone,
        )
        self.sheets.append_values(sheet_range(SHEET_VISITS, 0, Visit.WIDTH - 1), [visit.to_row()])
        logger.info(f"Visita {visit.visit_id} iniciada por {phone} en {store_id}")
        return visit

    def close_visit(self, visit_id: str) -> bool:
        visit = self.get_visit(visit_id)
        if not visit or visit.end_time:
            return False
        self.sheets.update_values(
            sheet_range(SHEET_VISITS, Visit.COL_END_TIME, Visit.COL_END_TIME, row=visit.row_number),
            [[now_iso()]],
        )
        logger.info(f"Visita {visit_id} cerrada")
        return True

    # ==========================
    # Capturas dentro de la visita
    # ==========================

    def _record_quantity(self, sheet: str, prefix: str, phone: str, visit_id: str,
                         store_id: str, product_id: str, quantity: int) -> str:
        record_id = new_id(prefix)
        self.sheets.append_values(
            sheet_range(sheet, 0, QUANTITY_WIDTH - 1),
            [[record_id, now_iso(), phone, visit_id, store_id, product_id, quantity]],
        )
        return record_id

    def record_inventory(self, phone, visit_id, store_id, product_id, quantity: int) -> str:
        return self._record_quantity(SHEET_INVENTORY, "INV", phone, visit_id, store_id, product_id, quantity)

    def record_sale(self, phone, visit_id, store_id, product_id, quantity: int) -> str:
        return self._record_quantity(SHEET_SALES, "VTA", phone, visit_id, store_id, product_id, quantity)

    def record_competitor_activity(self, phone: str, visit_id: str, store_id: str,
                                   activity: CompetitorActivity) -> str:
        record_id = new_id("COMP")
        self.sheets.append_values(
            sheet_range(SHEET_COMPETITION, 0, COMPETITION_WIDTH - 1),
            [[record_id, now_iso(), phone, visit_id, store_id, activity.activity_id,
              activity.competitor, activity.activity_type, activity.points]],
        )
        return record_id
