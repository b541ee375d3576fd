"""
Bitácoras de sólo-agregar: PUNTOS y EVIDENCIAS.

El "análisis" de evidencias es una tabla fija por tipo de evento / subtipo
(modo demo): no hay inferencia real sobre la foto.
"""

from typing import Dict, List, Optional

from promobolsillo.logger_utils import logger
from promobolsillo.models import (
    EVENT_CHECK_IN,
    EVENT_CHECK_OUT,
    EVENT_DIRECT_AUDIT,
    EVENT_EXHIBITION,
    EVENT_MEAL_OUT,
    EVENT_MEAL_RETURN,
    POINTS_OPERATION,
    POINTS_TRAINING,
    RISK_HIGH,
    RISK_LOW,
    RISK_MEDIUM,
    SHEET_EVIDENCE,
    SHEET_POINTS,
    Evidence,
    PointsEntry,
    PointsSummary,
)
from promobolsillo.sheets_utils import same_phone, sheet_range
from promobolsillo.time_utils import new_id, now_iso, today

DEMO_ANALYSIS: Dict[str, Dict] = {
    EVENT_CHECK_IN: {
        "analysis": "Foto de entrada en punto de venta (demo).",
        "confidence": 0.95,
        "risk": RISK_LOW,
    },
    EVENT_CHECK_OUT: {
        "analysis": "Foto de salida del día coherente con tienda (demo).",
        "confidence": 0.94,
        "risk": RISK_LOW,
    },
    EVENT_MEAL_OUT: {
        "analysis": "Salida a comer registrada (demo). Fondo de pasillo / salida.",
        "confidence": 0.90,
        "risk": RISK_LOW,
    },
    EVENT_MEAL_RETURN: {
        "analysis": "Regreso de comida, contexto de tienda (demo).",
        "confidence": 0.92,
        "risk": RISK_LOW,
    },
    EVENT_EXHIBITION: {
        "analysis": "Exhibición secundaria detectada, producto frontal visible (demo).",
        "confidence": 0.93,
        "risk": RISK_LOW,
    },
    EVENT_DIRECT_AUDIT: {
        "analysis": "Evidencia en punto de venta analizada (demo).",
        "confidence": 0.90,
        "risk": RISK_LOW,
    },
}

# Subtipos de evidencia de marca
SUBTYPE_SHELF = "ANAQUEL"
SUBTYPE_EXTRA_DISPLAY = "EXHIBICION_ADICIONAL"
SUBTYPE_PRICE = "PRECIO"
SUBTYPE_POP = "MATERIAL_POP"
SUBTYPE_OUT_OF_STOCK = "AGOTADO"

DEMO_ANALYSIS_BY_SUBTYPE: Dict[str, Dict] = {
    SUBTYPE_SHELF: {
        "analysis": "Anaquel con frentes de la marca visibles (demo).",
        "confidence": 0.91,
        "risk": RISK_LOW,
    },
    SUBTYPE_EXTRA_DISPLAY: {
        "analysis": "Exhibición adicional armada y surtida (demo).",
        "confidence": 0.93,
        "risk": RISK_LOW,
    },
    SUBTYPE_POP: {
        "analysis": "Material POP colocado en punto de venta (demo).",
        "confidence": 0.88,
        "risk": RISK_LOW,
    },
    SUBTYPE_PRICE: {
        "analysis": "Etiqueta de precio posiblemente fuera del sugerido (demo).",
        "confidence": 0.80,
        "risk": RISK_MEDIUM,
    },
    SUBTYPE_OUT_OF_STOCK: {
        "analysis": "Hueco en anaquel: posible producto agotado (demo).",
        "confidence": 0.85,
        "risk": RISK_HIGH,
    },
}

DEFAULT_ANALYSIS = {
    "analysis": "Evidencia registrada (demo).",
    "confidence": 0.90,
    "risk": RISK_LOW,
}


def demo_analysis(event_type: str, subtype: str = "") -> Dict:
    if subtype and subtype in DEMO_ANALYSIS_BY_SUBTYPE:
        return DEMO_ANALYSIS_BY_SUBTYPE[subtype]
    return DEMO_ANALYSIS.get(event_type, DEFAULT_ANALYSIS)


class PointsLedger:
    """PUNTOS: A fecha_hora, B telefono, C tipo, D origen, E puntos"""

    def __init__(self, sheets):
        self.sheets = sheets

    def entries(self) -> List[PointsEntry]:
        rows = self.sheets.get_values(sheet_range(SHEET_POINTS, 0, PointsEntry.WIDTH - 1))
        return [PointsEntry.from_row(r) for r in rows if r]

    def add_points(self, phone: str, category: str, reason: str, amount: int) -> PointsEntry:
        entry = PointsEntry(now_iso(), phone, category, reason, int(amount))
        self.sheets.append_values(
            sheet_range(SHEET_POINTS, 0, PointsEntry.WIDTH - 1), [entry.to_row()]
        )
        logger.info(f"+{amount} {category} para {phone} ({reason})")
        return entry

    def has_reason(self, phone: str, reason: str) -> bool:
        return any(e.reason == reason and same_phone(e.phone, phone) for e in self.entries())

    def award_once(self, phone: str, category: str, reason: str, amount: int) -> bool:
        """Sólo suma si no existe ya un registro con el mismo teléfono y origen."""
        if self.has_reason(phone, reason):
            logger.info(f"Puntos ya otorgados a {phone} por {reason}; se omite")
            return False
        self.add_points(phone, category, reason, amount)
        return True

    def summary(self, phone: str) -> PointsSummary:
        result = PointsSummary()
        for e in self.entries():
            if not same_phone(e.phone, phone):
                continue
            if e.category == POINTS_OPERATION:
                result.operacion += e.amount
            elif e.category == POINTS_TRAINING:
                result.capacitacion += e.amount
        return result


class EvidenceLedger:
    def __init__(self, sheets):
        self.sheets = sheets

    def all(self) -> List[Evidence]:
        rows = self.sheets.get_values(sheet_range(SHEET_EVIDENCE, 0, Evidence.WIDTH - 1))
        return [Evidence.from_row(r) for r in rows if r]

    def register(
        self,
        phone: str,
        event_type: str,
        origin: str,
        shift_id: str = "",
        visit_id: str = "",
        photo_url: str = "",
        lat: str = "",
        lon: str = "",
        brand_id: str = "",
        product_id: str = "",
        subtype: str = "",
        description: str = "",
    ) -> Evidence:
        canned = demo_analysis(event_type, subtype)
        evidence = Evidence(
            evidence_id=new_id("EV"),
            phone=phone,
            timestamp=now_iso(),
            event_type=event_type,
            origin=origin,
            shift_id=shift_id,
            visit_id=visit_id,
            photo_url=photo_url,
            lat=lat,
            lon=lon,
            analysis=canned["analysis"],
            confidence=canned["confidence"],
            risk=canned["risk"],
            brand_id=brand_id,
            product_id=product_id,
            subtype=subtype,
            description=description,
        )
        self.sheets.append_values(
            sheet_range(SHEET_EVIDENCE, 0, Evidence.WIDTH - 1), [evidence.to_row()]
        )
        logger.info(f"Evidencia {evidence.evidence_id} ({evidence.label}) de {phone}, riesgo {evidence.risk}")
        return evidence

    def today(self) -> List[Evidence]:
        day = today()
        return [ev for ev in self.all() if ev.timestamp[:10] == day]

    def today_for(self, phone: str) -> List[Evidence]:
        items = [ev for ev in self.today() if same_phone(ev.phone, phone)]
        return sorted(items, key=lambda ev: ev.timestamp)

    def get(self, evidence_id: str) -> Optional[Evidence]:
        for ev in self.all():
            if ev.evidence_id == evidence_id:
                return ev
        return None

    def by_ids(self, evidence_ids: List[str]) -> List[Evidence]:
        """Conserva el orden de `evidence_ids`; ids que ya no existen se omiten."""
        index = {ev.evidence_id: ev for ev in self.all()}
        return [index[i] for i in evidence_ids if i in index]
