"""Agregados para los reportes de supervisor. Funciones puras sobre filas ya leídas."""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from promobolsillo.models import RISK_HIGH, RISK_MEDIUM, Evidence
from promobolsillo.sheets_utils import phones_match

NO_STORE = "(sin tienda)"


@dataclass
class AttendanceStats:
    total: int = 0
    last_date: str = ""


def for_phone(evidence: Iterable[Evidence], phone: str) -> List[Evidence]:
    return [ev for ev in evidence if phones_match(phone, ev.phone)]


def count_by_phone(evidence: Iterable[Evidence], phones: Iterable[str]) -> Dict[str, int]:
    """Fotos por teléfono del equipo (el teléfono de la hoja puede venir sin lada)."""
    evidence = list(evidence)
    return {phone: len(for_phone(evidence, phone)) for phone in phones}


def risky(evidence: Iterable[Evidence]) -> List[Evidence]:
    return [ev for ev in evidence if ev.risk in (RISK_MEDIUM, RISK_HIGH)]


def _store_label(ev: Evidence, visits: Dict, stores: Dict) -> str:
    visit = visits.get(ev.visit_id)
    store = stores.get(visit.store_id) if visit else None
    return store.label if store else NO_STORE


def group_by_store_brand(evidence, visits, stores, brands) -> List[Tuple[str, str, int]]:
    """(tienda, marca, fotos) en orden de primera aparición; sólo evidencias con marca."""
    visits_by_id = {v.visit_id: v for v in visits}
    stores_by_id = {s.store_id: s for s in stores}
    brands_by_id = {b.brand_id: b for b in brands}

    counts: "OrderedDict[Tuple[str, str], int]" = OrderedDict()
    for ev in evidence:
        if not ev.brand_id:
            continue
        brand = brands_by_id.get(ev.brand_id)
        key = (_store_label(ev, visits_by_id, stores_by_id), brand.name if brand else ev.brand_id)
        counts[key] = counts.get(key, 0) + 1
    return [(store, brand, n) for (store, brand), n in counts.items()]


def group_by_promoter_store_brand(evidence, visits, stores, brands, promoters) -> List[Tuple[str, str, str, int]]:
    visits_by_id = {v.visit_id: v for v in visits}
    stores_by_id = {s.store_id: s for s in stores}
    brands_by_id = {b.brand_id: b for b in brands}
    promoters = list(promoters)

    counts: "OrderedDict[Tuple[str, str, str], int]" = OrderedDict()
    for ev in evidence:
        if not ev.brand_id:
            continue
        promoter = next((p for p in promoters if phones_match(p.phone, ev.phone)), None)
        brand = brands_by_id.get(ev.brand_id)
        key = (
            promoter.name if promoter else ev.phone,
            _store_label(ev, visits_by_id, stores_by_id),
            brand.name if brand else ev.brand_id,
        )
        counts[key] = counts.get(key, 0) + 1
    return [(promoter, store, brand, n) for (promoter, store, brand), n in counts.items()]


def attendance_by_phone(shifts, phones: Iterable[str]) -> Dict[str, AttendanceStats]:
    shifts = list(shifts)
    result = {}
    for phone in phones:
        stats = AttendanceStats()
        for s in shifts:
            if not phones_match(phone, s.phone):
                continue
            stats.total += 1
            if s.date > stats.last_date:
                stats.last_date = s.date
        result[phone] = stats
    return result


def shifts_for_phone(shifts, phone: str, max_items: int = 10) -> List:
    """Jornadas de un promotor del catálogo (teléfono de PROMOTORES), más recientes primero."""
    items = [s for s in shifts if phones_match(phone, s.phone)]
    items.sort(key=lambda s: (s.date, s.check_in_time), reverse=True)
    return items[:max_items]
