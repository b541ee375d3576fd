"""Consultas de sólo lectura sobre los catálogos de la hoja (promotores, tiendas, marcas...)."""

from typing import List, Optional

from promobolsillo.models import (
    SHEET_BRANDS,
    SHEET_CHALLENGES,
    SHEET_CLIENT_GROUPS,
    SHEET_COMPETITOR_ACTIVITIES,
    SHEET_PRODUCTS,
    SHEET_PROMOTERS,
    SHEET_STORE_BRAND,
    SHEET_STORES,
    SHEET_SUPERVISORS,
    Brand,
    Challenge,
    ClientGroup,
    CompetitorActivity,
    Product,
    Promoter,
    Store,
    StoreBrand,
    Supervisor,
)
from promobolsillo.sheets_utils import phones_match, sheet_range

MAX_OPTIONS = 6


class Catalog:
    def __init__(self, sheets):
        self.sheets = sheets

    def _rows(self, sheet: str, width: int) -> List[List[str]]:
        return self.sheets.get_values(sheet_range(sheet, 0, width - 1))

    # -------- Personas --------

    def promoters(self) -> List[Promoter]:
        return [Promoter.from_row(r) for r in self._rows(SHEET_PROMOTERS, Promoter.WIDTH) if r]

    def get_promoter(self, phone: str) -> Optional[Promoter]:
        for p in self.promoters():
            if phones_match(p.phone, phone):
                return p
        return None

    def get_supervisor(self, phone: str) -> Optional[Supervisor]:
        """Sólo supervisores activos; un supervisor inactivo se trata como promotor."""
        for r in self._rows(SHEET_SUPERVISORS, Supervisor.WIDTH):
            sup = Supervisor.from_row(r)
            if sup.active and phones_match(sup.phone, phone):
                return sup
        return None

    def get_team(self, supervisor_phone: str) -> List[Promoter]:
        return [
            p for p in self.promoters()
            if p.active and p.supervisor_phone and phones_match(p.supervisor_phone, supervisor_phone)
        ]

    # -------- Tiendas y marcas --------

    def stores(self) -> List[Store]:
        return [Store.from_row(r) for r in self._rows(SHEET_STORES, Store.WIDTH) if r]

    def get_store(self, store_id: str) -> Optional[Store]:
        if not store_id:
            return None
        for s in self.stores():
            if s.store_id == store_id:
                return s
        return None

    def get_stores_for_promoter(self, promoter: Optional[Promoter]) -> List[Store]:
        active = [s for s in self.stores() if s.active]
        filtered = active
        if promoter:
            filtered = [
                s for s in active
                if (promoter.region and s.region == promoter.region)
                or (promoter.primary_chain and s.chain == promoter.primary_chain)
            ] or active
        return filtered[:MAX_OPTIONS]

    def brands(self) -> List[Brand]:
        return [Brand.from_row(r) for r in self._rows(SHEET_BRANDS, Brand.WIDTH) if r]

    def get_brand(self, brand_id: str) -> Optional[Brand]:
        for b in self.brands():
            if b.brand_id == brand_id:
                return b
        return None

    def get_brands_for_store(self, store_id: str = "") -> List[Brand]:
        """Marcas activas de la tienda según TIENDA_MARCA (por prioridad); sin mapeo, todas las activas."""
        active = [b for b in self.brands() if b.active]
        if not store_id:
            return active
        mapping = [
            StoreBrand.from_row(r)
            for r in self._rows(SHEET_STORE_BRAND, StoreBrand.WIDTH)
        ]
        mapping = sorted(
            (m for m in mapping if m.active and m.store_id == store_id),
            key=lambda m: m.priority,
        )
        by_id = {b.brand_id: b for b in active}
        mapped = [by_id[m.brand_id] for m in mapping if m.brand_id in by_id]
        return mapped or active

    # -------- Productos --------

    def products(self) -> List[Product]:
        return [Product.from_row(r) for r in self._rows(SHEET_PRODUCTS, Product.WIDTH) if r]

    def get_products_for_brand(self, brand_id: str) -> List[Product]:
        products = [p for p in self.products() if p.brand_id == brand_id]
        products.sort(key=lambda p: not p.is_priority)
        return products[:MAX_OPTIONS]

    def find_product_by_barcode(self, code: str, brand_id: str = "") -> Optional[Product]:
        code = (code or "").strip()
        if not code:
            return None
        for p in self.products():
            if p.barcode == code and (not brand_id or p.brand_id == brand_id):
                return p
        return None

    def get_focus_products(self) -> List[Product]:
        products = self.products()
        focus = [p for p in products if p.is_priority]
        return (focus or products)[:MAX_OPTIONS]

    def get_product(self, product_id: str) -> Optional[Product]:
        for p in self.products():
            if p.product_id == product_id:
                return p
        return None

    # -------- Competencia --------

    def competitor_activities(self) -> List[CompetitorActivity]:
        return [
            CompetitorActivity.from_row(r)
            for r in self._rows(SHEET_COMPETITOR_ACTIVITIES, CompetitorActivity.WIDTH)
            if r
        ]

    def get_competitors(self) -> List[str]:
        seen = []
        for a in self.competitor_activities():
            if a.competitor and a.competitor not in seen:
                seen.append(a.competitor)
        return seen

    def get_competitor_activities(self, competitor: str) -> List[CompetitorActivity]:
        return [a for a in self.competitor_activities() if a.competitor == competitor]

    # -------- Clientes y academia --------

    def get_active_client_groups(self) -> List[ClientGroup]:
        groups = [ClientGroup.from_row(r) for r in self._rows(SHEET_CLIENT_GROUPS, ClientGroup.WIDTH)]
        return [g for g in groups if g.active]

    def get_active_challenges(self) -> List[Challenge]:
        challenges = [Challenge.from_row(r) for r in self._rows(SHEET_CHALLENGES, Challenge.WIDTH)]
        return [c for c in challenges if c.active and c.challenge_id]
