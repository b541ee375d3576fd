"""
Estados de conversación y los datos que carga cada uno.

Cada estado tiene su propia dataclass con exactamente los campos que necesita;
en la hoja SESIONES se guarda como JSON. Estados sin datos usan `NoData`.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Dict, List, Type

# Promotor
STATE_MENU = "MENU_PRINCIPAL"

# Mi día de trabajo
STATE_DIA_MENU = "DIA_MENU"
STATE_JORNADA_FOTO = "JORNADA_FOTO_SUBEVENTO"
STATE_JORNADA_UBICACION = "JORNADA_UBICACION_SUBEVENTO"

# Evidencias de marca
STATE_EVID_MARCA = "EVID_ELEGIR_MARCA"
STATE_EVID_TIPO = "EVID_ELEGIR_TIPO"
STATE_EVID_PRODUCTO = "EVID_ELEGIR_PRODUCTO"
STATE_EVID_FOTO = "EVID_FOTO"
STATE_EVID_DESCRIPCION = "EVID_DESCRIPCION"

# Auditoría de fotos (directa o exhibición dentro de visita)
STATE_EVIDENCIA_FOTO = "EVIDENCIA_FOTO"

# Operación en tienda
STATE_OPER_MENU = "OPER_MENU"
STATE_OPER_TIENDA = "OPER_ELEGIR_TIENDA"
STATE_OPER_VISITA = "OPER_VISITA_MENU"
STATE_OPER_PRODUCTO = "OPER_PRODUCTO"
STATE_OPER_CANTIDAD = "OPER_CANTIDAD"
STATE_OPER_COMPETIDOR = "OPER_COMP_COMPETIDOR"
STATE_OPER_ACTIVIDAD = "OPER_COMP_ACTIVIDAD"
STATE_OPER_CERRAR = "OPER_CERRAR_VISITA"

# Academia
STATE_ACAD_MENU = "ACAD_MENU"
STATE_ACAD_RETO = "ACAD_RETO"

# Supervisor
STATE_SUP_MENU = "SUP_MENU"
STATE_SUP_PROMOTORES = "SUP_PROMOTOR_LIST"
STATE_SUP_FOTOS = "SUP_FOTOS_LIST"
STATE_SUP_GRUPO = "SUP_ELEGIR_GRUPO"
STATE_SUP_ASISTENCIA = "SUP_ASIST_PROM_LIST"

SUP_STATES = {
    STATE_SUP_MENU,
    STATE_SUP_PROMOTORES,
    STATE_SUP_FOTOS,
    STATE_SUP_GRUPO,
    STATE_SUP_ASISTENCIA,
}

# Modos de la captura de cantidades y de la auditoría de fotos
MODE_INVENTORY = "INVENTARIO"
MODE_SALES = "VENTA"
MODE_DIRECT_AUDIT = "AUDITORIA_DIRECTA"
MODE_EXHIBITION = "FOTO_EXHIBICION"

# Listados de fotos del supervisor
PHOTOS_BY_PROMOTER = "POR_PROMOTOR"
PHOTOS_BY_RISK = "RIESGO"


class InvalidSessionData(ValueError):
    pass


@dataclass
class NoData:
    pass


@dataclass
class PhotoWait:
    shift_id: str
    subtype: str


@dataclass
class LocationWait:
    shift_id: str
    subtype: str
    photo_url: str


@dataclass
class BrandPick:
    brand_ids: List[str]
    visit_id: str = ""


@dataclass
class EvidenceTypePick:
    brand_id: str
    visit_id: str = ""


@dataclass
class EvidenceProductPick:
    brand_id: str
    subtype: str
    product_ids: List[str]
    visit_id: str = ""


@dataclass
class EvidencePhotoWait:
    brand_id: str
    subtype: str
    product_id: str = ""
    visit_id: str = ""


@dataclass
class EvidenceDescriptionWait:
    brand_id: str
    subtype: str
    photo_url: str
    product_id: str = ""
    visit_id: str = ""
    lat: str = ""
    lon: str = ""


@dataclass
class AuditPhotoWait:
    mode: str
    visit_id: str = ""


@dataclass
class StorePick:
    store_ids: List[str]


@dataclass
class VisitContext:
    visit_id: str
    store_id: str


@dataclass
class ProductLoop:
    visit_id: str
    store_id: str
    mode: str
    product_ids: List[str]


@dataclass
class QuantityWait:
    visit_id: str
    store_id: str
    mode: str
    product_ids: List[str]
    product_id: str


@dataclass
class CompetitorPick:
    visit_id: str
    store_id: str
    competitors: List[str]


@dataclass
class ActivityPick:
    visit_id: str
    store_id: str
    competitor: str
    activity_ids: List[str]


@dataclass
class ChallengeWait:
    challenge_id: str


@dataclass
class PromoterPick:
    promoter_phones: List[str]


@dataclass
class PhotoList:
    mode: str
    evidence_ids: List[str]
    promoter_name: str = ""


@dataclass
class GroupPick:
    evidence_ids: List[str]
    group_ids: List[str] = field(default_factory=list)


STATE_DATA: Dict[str, Type] = {
    STATE_JORNADA_FOTO: PhotoWait,
    STATE_JORNADA_UBICACION: LocationWait,
    STATE_EVID_MARCA: BrandPick,
    STATE_EVID_TIPO: EvidenceTypePick,
    STATE_EVID_PRODUCTO: EvidenceProductPick,
    STATE_EVID_FOTO: EvidencePhotoWait,
    STATE_EVID_DESCRIPCION: EvidenceDescriptionWait,
    STATE_EVIDENCIA_FOTO: AuditPhotoWait,
    STATE_OPER_TIENDA: StorePick,
    STATE_OPER_VISITA: VisitContext,
    STATE_OPER_PRODUCTO: ProductLoop,
    STATE_OPER_CANTIDAD: QuantityWait,
    STATE_OPER_COMPETIDOR: CompetitorPick,
    STATE_OPER_ACTIVIDAD: ActivityPick,
    STATE_OPER_CERRAR: VisitContext,
    STATE_ACAD_RETO: ChallengeWait,
    STATE_SUP_PROMOTORES: PromoterPick,
    STATE_SUP_ASISTENCIA: PromoterPick,
    STATE_SUP_FOTOS: PhotoList,
    STATE_SUP_GRUPO: GroupPick,
}

KNOWN_STATES = set(STATE_DATA) | {
    STATE_MENU,
    STATE_DIA_MENU,
    STATE_OPER_MENU,
    STATE_ACAD_MENU,
    STATE_SUP_MENU,
}


def data_class_for(state: str) -> Type:
    return STATE_DATA.get(state, NoData)


def dump_data(data) -> Dict:
    return asdict(data) if data is not None else {}


def load_data(state: str, raw: Dict):
    """Reconstruye la dataclass del estado; lanza InvalidSessionData si no corresponde."""
    cls = data_class_for(state)
    if cls is NoData:
        return NoData()
    if not isinstance(raw, dict):
        raise InvalidSessionData(f"data de {state} no es un objeto")
    names = {f.name for f in fields(cls)}
    unknown = set(raw) - names
    if unknown:
        raise InvalidSessionData(f"campos desconocidos para {state}: {sorted(unknown)}")
    try:
        data = cls(**raw)
    except TypeError as e:
        raise InvalidSessionData(f"faltan campos para {state}: {e}") from e
    for f in fields(cls):
        value = getattr(data, f.name)
        if f.type in (List[str], list) and not isinstance(value, list):
            raise InvalidSessionData(f"{state}.{f.name} debe ser lista")
    return data


def validate_transition(state: str, data) -> None:
    """Evita guardar un estado con datos de otro estado."""
    cls = data_class_for(state)
    if not isinstance(data, cls):
        raise TypeError(f"{state} espera {cls.__name__}, recibió {type(data).__name__}")
