"""
Filas de la hoja de cálculo como dataclasses.

Cada hoja tiene un layout fijo de columnas (por posición, no por nombre);
`from_row` tolera filas recortadas y `to_row` produce la fila completa en el
mismo orden. `row_number` es la fila real en la hoja (1-based, con encabezado)
cuando el registro se leyó de ahí.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from promobolsillo.sheets_utils import cell, is_true, to_number

# Nombres de hojas
SHEET_SESSIONS = "SESIONES"
SHEET_POINTS = "PUNTOS"
SHEET_PROMOTERS = "PROMOTORES"
SHEET_SUPERVISORS = "SUPERVISORES"
SHEET_STORES = "TIENDAS"
SHEET_BRANDS = "MARCAS"
SHEET_STORE_BRAND = "TIENDA_MARCA"
SHEET_PRODUCTS = "PRODUCTOS"
SHEET_COMPETITOR_ACTIVITIES = "ACTIVIDADES_COMPETENCIA"
SHEET_SHIFTS = "JORNADAS"
SHEET_VISITS = "VISITAS"
SHEET_EVIDENCE = "EVIDENCIAS"
SHEET_CLIENT_GROUPS = "GRUPOS_CLIENTE"
SHEET_INVENTORY = "INVENTARIO"
SHEET_SALES = "VENTAS"
SHEET_COMPETITION = "COMPETENCIA"
SHEET_CHALLENGES = "RETOS"
SHEET_CHALLENGE_RESPONSES = "RESPUESTAS_RETOS"

# Vocabularios
SHIFT_OPEN = "ABIERTA"
SHIFT_CLOSED = "CERRADA"

POINTS_OPERATION = "OPERACION"
POINTS_TRAINING = "CAPACITACION"

RISK_LOW = "BAJO"
RISK_MEDIUM = "MEDIO"
RISK_HIGH = "ALTO"

EVENT_CHECK_IN = "ENTRADA_DIA"
EVENT_MEAL_OUT = "SALIDA_COMIDA"
EVENT_MEAL_RETURN = "REGRESO_COMIDA"
EVENT_CHECK_OUT = "SALIDA_DIA"
EVENT_EXHIBITION = "FOTO_EXHIBICION"
EVENT_DIRECT_AUDIT = "AUDITORIA_DIRECTA"
EVENT_BRAND = "EVIDENCIA_MARCA"

ORIGIN_SHIFT = "JORNADA"
ORIGIN_VISIT = "VISITA"
ORIGIN_DIRECT = "DIRECTO"
ORIGIN_BRAND = "MARCA"


@dataclass
class Promoter:
    phone: str
    promoter_id: str = ""
    name: str = ""
    region: str = ""
    primary_chain: str = ""
    active: bool = False
    supervisor_phone: str = ""

    WIDTH = 7

    @classmethod
    def from_row(cls, r: List) -> "Promoter":
        return cls(
            phone=cell(r, 0),
            promoter_id=cell(r, 1),
            name=cell(r, 2),
            region=cell(r, 3),
            primary_chain=cell(r, 4),
            active=is_true(cell(r, 5)),
            supervisor_phone=cell(r, 6),
        )


@dataclass
class Supervisor:
    phone: str
    supervisor_id: str = ""
    name: str = ""
    region: str = ""
    level: str = ""
    active: bool = False

    WIDTH = 6

    @classmethod
    def from_row(cls, r: List) -> "Supervisor":
        return cls(
            phone=cell(r, 0),
            supervisor_id=cell(r, 1),
            name=cell(r, 2),
            region=cell(r, 3),
            level=cell(r, 4).upper(),
            active=is_true(cell(r, 5)),
        )


@dataclass
class Store:
    store_id: str
    name: str = ""
    chain: str = ""
    city: str = ""
    region: str = ""
    active: bool = False

    WIDTH = 6

    @classmethod
    def from_row(cls, r: List) -> "Store":
        return cls(
            store_id=cell(r, 0),
            name=cell(r, 1),
            chain=cell(r, 2),
            city=cell(r, 3),
            region=cell(r, 4),
            active=is_true(cell(r, 5)),
        )

    @property
    def label(self) -> str:
        return f"{self.name} ({self.city})" if self.city else self.name


@dataclass
class Brand:
    brand_id: str
    name: str = ""
    client_name: str = ""
    active: bool = False

    WIDTH = 4

    @classmethod
    def from_row(cls, r: List) -> "Brand":
        return cls(
            brand_id=cell(r, 0),
            name=cell(r, 1),
            client_name=cell(r, 2),
            active=is_true(cell(r, 3)),
        )


@dataclass
class StoreBrand:
    store_id: str
    brand_id: str
    priority: int = 0
    active: bool = False

    WIDTH = 4

    @classmethod
    def from_row(cls, r: List) -> "StoreBrand":
        return cls(
            store_id=cell(r, 0),
            brand_id=cell(r, 1),
            priority=int(to_number(cell(r, 2), 999)),
            active=is_true(cell(r, 3)),
        )


@dataclass
class Product:
    product_id: str
    barcode: str = ""
    name: str = ""
    category: str = ""
    brand_id: str = ""
    is_priority: bool = False
    suggested_price: str = ""

    WIDTH = 7

    @classmethod
    def from_row(cls, r: List) -> "Product":
        return cls(
            product_id=cell(r, 0),
            barcode=cell(r, 1),
            name=cell(r, 2),
            category=cell(r, 3),
            brand_id=cell(r, 4),
            is_priority=is_true(cell(r, 5)),
            suggested_price=cell(r, 6),
        )


@dataclass
class CompetitorActivity:
    activity_id: str
    competitor: str = ""
    activity_type: str = ""
    description: str = ""
    points: int = 0

    WIDTH = 5

    @classmethod
    def from_row(cls, r: List) -> "CompetitorActivity":
        return cls(
            activity_id=cell(r, 0),
            competitor=cell(r, 1),
            activity_type=cell(r, 2),
            description=cell(r, 3),
            points=int(to_number(cell(r, 4))),
        )


@dataclass
class Shift:
    shift_id: str
    phone: str
    promoter_id: str = ""
    date: str = ""
    check_in_time: str = ""
    check_in_lat: str = ""
    check_in_lon: str = ""
    check_in_photo_url: str = ""
    check_out_time: str = ""
    check_out_lat: str = ""
    check_out_lon: str = ""
    check_out_photo_url: str = ""
    status: str = SHIFT_OPEN
    store_id: str = ""
    row_number: int = 0

    WIDTH = 14

    # Índices de columnas que se actualizan en sitio
    COL_CHECK_IN_LAT = 5
    COL_CHECK_IN_PHOTO = 7
    COL_CHECK_OUT_TIME = 8
    COL_CHECK_OUT_LAT = 9
    COL_CHECK_OUT_PHOTO = 11
    COL_STATUS = 12

    @classmethod
    def from_row(cls, r: List, row_number: int = 0) -> "Shift":
        return cls(
            shift_id=cell(r, 0),
            phone=cell(r, 1),
            promoter_id=cell(r, 2),
            date=cell(r, 3),
            check_in_time=cell(r, 4),
            check_in_lat=cell(r, 5),
            check_in_lon=cell(r, 6),
            check_in_photo_url=cell(r, 7),
            check_out_time=cell(r, 8),
            check_out_lat=cell(r, 9),
            check_out_lon=cell(r, 10),
            check_out_photo_url=cell(r, 11),
            status=cell(r, 12).upper() or SHIFT_OPEN,
            store_id=cell(r, 13),
            row_number=row_number,
        )

    def to_row(self) -> List:
        return [
            self.shift_id, self.phone, self.promoter_id, self.date,
            self.check_in_time, self.check_in_lat, self.check_in_lon, self.check_in_photo_url,
            self.check_out_time, self.check_out_lat, self.check_out_lon, self.check_out_photo_url,
            self.status, self.store_id,
        ]

    @property
    def is_open(self) -> bool:
        return self.status != SHIFT_CLOSED


@dataclass
class Visit:
    visit_id: str
    promoter_id: str = ""
    store_id: str = ""
    date: str = ""
    start_time: str = ""
    end_time: str = ""
    phone: str = ""
    row_number: int = 0

    WIDTH = 7
    COL_END_TIME = 5

    @classmethod
    def from_row(cls, r: List, row_number: int = 0) -> "Visit":
        return cls(
            visit_id=cell(r, 0),
            promoter_id=cell(r, 1),
            store_id=cell(r, 2),
            date=cell(r, 3),
            start_time=cell(r, 4),
            end_time=cell(r, 5),
            phone=cell(r, 6),
            row_number=row_number,
        )

    def to_row(self) -> List:
        return [self.visit_id, self.promoter_id, self.store_id, self.date,
                self.start_time, self.end_time, self.phone]


@dataclass
class Evidence:
    evidence_id: str
    phone: str
    timestamp: str = ""
    event_type: str = ""
    origin: str = ""
    shift_id: str = ""
    visit_id: str = ""
    photo_url: str = ""
    lat: str = ""
    lon: str = ""
    analysis: str = ""
    confidence: float = 0.0
    risk: str = RISK_LOW
    brand_id: str = ""
    product_id: str = ""
    subtype: str = ""
    description: str = ""

    WIDTH = 17

    @classmethod
    def from_row(cls, r: List) -> "Evidence":
        return cls(
            evidence_id=cell(r, 0),
            phone=cell(r, 1),
            timestamp=cell(r, 2),
            event_type=cell(r, 3),
            origin=cell(r, 4),
            shift_id=cell(r, 5),
            visit_id=cell(r, 6),
            photo_url=cell(r, 7),
            lat=cell(r, 8),
            lon=cell(r, 9),
            analysis=cell(r, 10),
            confidence=to_number(cell(r, 11)),
            risk=(cell(r, 12) or RISK_LOW).upper(),
            brand_id=cell(r, 13),
            product_id=cell(r, 14),
            subtype=cell(r, 15),
            description=cell(r, 16),
        )

    def to_row(self) -> List:
        return [
            self.evidence_id, self.phone, self.timestamp, self.event_type, self.origin,
            self.shift_id, self.visit_id, self.photo_url, self.lat, self.lon,
            self.analysis, self.confidence, self.risk,
            self.brand_id, self.product_id, self.subtype, self.description,
        ]

    @property
    def label(self) -> str:
        return f"{self.event_type} ({self.subtype})" if self.subtype else self.event_type


@dataclass
class PointsEntry:
    timestamp: str
    phone: str
    category: str
    reason: str
    amount: int

    WIDTH = 5

    @classmethod
    def from_row(cls, r: List) -> "PointsEntry":
        return cls(
            timestamp=cell(r, 0),
            phone=cell(r, 1),
            category=cell(r, 2).upper(),
            reason=cell(r, 3),
            amount=int(to_number(cell(r, 4))),
        )

    def to_row(self) -> List:
        return [self.timestamp, self.phone, self.category, self.reason, self.amount]


@dataclass
class PointsSummary:
    operacion: int = 0
    capacitacion: int = 0

    @property
    def total(self) -> int:
        return self.operacion + self.capacitacion


@dataclass
class ClientGroup:
    group_id: str
    name: str = ""
    client_name: str = ""
    phones: List[str] = field(default_factory=list)
    active: bool = False

    WIDTH = 5

    @classmethod
    def from_row(cls, r: List) -> "ClientGroup":
        phones = [t.strip() for t in cell(r, 3).split(",") if t.strip()]
        return cls(
            group_id=cell(r, 0),
            name=cell(r, 1),
            client_name=cell(r, 2),
            phones=phones,
            active=is_true(cell(r, 4)),
        )


@dataclass
class Challenge:
    challenge_id: str
    question: str
    options: List[str] = field(default_factory=list)
    correct_option: int = 1
    points_correct: int = 0
    points_incorrect: int = 0
    active: bool = False

    WIDTH = 9

    @classmethod
    def from_row(cls, r: List) -> "Challenge":
        return cls(
            challenge_id=cell(r, 0),
            question=cell(r, 1),
            options=[cell(r, 2), cell(r, 3), cell(r, 4)],
            correct_option=int(to_number(cell(r, 5), 1)),
            points_correct=int(to_number(cell(r, 6))),
            points_incorrect=int(to_number(cell(r, 7))),
            active=is_true(cell(r, 8)),
        )


@dataclass
class ChallengeResult:
    challenge: Challenge
    chosen: int
    correct: bool
    points: int


@dataclass
class SendResult:
    destination: str
    ok: bool
    error: Optional[str] = None
