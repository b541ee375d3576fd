import json
import re
import threading
from typing import List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from promobolsillo.errors import SheetsAccessError, SheetsConfigError
from promobolsillo.logger_utils import logger

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Texto tal cual: sin conversión de teléfonos a número ni de fechas
VALUE_INPUT_OPTION = "RAW"

# Los datos empiezan en la fila 2 (fila 1 = encabezados)
FIRST_DATA_ROW = 2


def column_letter(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA"""
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def sheet_range(sheet: str, first_col: int, last_col: int, row: Optional[int] = None) -> str:
    """
    Rango A1 para una hoja. Sin `row` devuelve todas las filas de datos
    (p. ej. JORNADAS!A2:N); con `row` sólo esa fila (JORNADAS!H5:H5).
    """
    first = column_letter(first_col)
    last = column_letter(last_col)
    if row is None:
        return f"{sheet}!{first}{FIRST_DATA_ROW}:{last}"
    return f"{sheet}!{first}{row}:{last}{row}"


def sheet_row_number(data_index: int) -> int:
    return data_index + FIRST_DATA_ROW


def cell(row: List, index: int, default: str = "") -> str:
    """Las filas de Sheets vienen recortadas: las celdas vacías finales no llegan."""
    if index < len(row) and row[index] is not None:
        return str(row[index]).strip()
    return default


def is_true(value) -> bool:
    return str(value or "").strip().upper() == "TRUE"


def to_number(value, default: float = 0) -> float:
    try:
        return float(str(value).strip().replace(",", "."))
    except (TypeError, ValueError):
        return default


def normalize_phone(raw: str) -> str:
    """whatsapp:+52 1 55... -> +52155..."""
    phone = (raw or "").strip()
    if phone.lower().startswith("whatsapp:"):
        phone = phone.split(":", 1)[1]
    return re.sub(r"\s+", "", phone)


def phone_digits(raw: str) -> str:
    return re.sub(r"\D", "", normalize_phone(raw))


def same_phone(stored: str, phone: str) -> bool:
    """
    Igualdad del número normalizado, para las hojas que escribe el bot
    (SESIONES, JORNADAS, VISITAS, PUNTOS, EVIDENCIAS, RESPUESTAS_RETOS).
    Sólo dígitos: una celda convertida a número pierde el "+".
    """
    digits = phone_digits(stored)
    return bool(digits) and digits == phone_digits(phone)


def phones_match(sheet_value: str, phone: str) -> bool:
    """
    Coincidencia exacta o por terminación de dígitos, sólo para catálogos capturados
    a mano (PROMOTORES, SUPERVISORES): la hoja puede traer el número sin lada.
    """
    sheet_raw = normalize_phone(sheet_value)
    phone_raw = normalize_phone(phone)
    if not sheet_raw or not phone_raw:
        return False
    if sheet_raw == phone_raw:
        return True
    sheet_digits = phone_digits(sheet_raw)
    return bool(sheet_digits) and phone_digits(phone_raw).endswith(sheet_digits)


class SheetsClient:
    """
    Acceso por rangos a la hoja de cálculo (get / append / update).

    Se construye una sola vez al arrancar y se inyecta en los servicios.
    El servicio de Google se crea en el primer uso, así que una configuración
    incompleta sólo falla cuando realmente se intenta leer o escribir.

    Cada hilo del threadpool tiene su propio servicio (httplib2 no es thread-safe);
    las credenciales se comparten.
    """

    def __init__(self, sheet_id: str, service_account_json: str):
        self.sheet_id = sheet_id
        self.service_account_json = service_account_json
        self._credentials = None
        self._local = threading.local()
        if not sheet_id or not service_account_json:
            logger.warning("⚠️ Falta SHEET_ID o GOOGLE_SERVICE_ACCOUNT_JSON en variables de entorno")

    def _get_credentials(self):
        if self._credentials is None:
            if not self.sheet_id or not self.service_account_json:
                raise SheetsConfigError("SHEET_ID / GOOGLE_SERVICE_ACCOUNT_JSON no configurados")
            try:
                info = json.loads(self.service_account_json)
            except ValueError as e:
                raise SheetsConfigError(f"GOOGLE_SERVICE_ACCOUNT_JSON no es JSON válido: {e}") from e
            self._credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        return self._credentials

    def _values(self):
        service = getattr(self._local, "service", None)
        if service is None:
            service = build("sheets", "v4", credentials=self._get_credentials(), cache_discovery=False)
            self._local.service = service
            logger.info(f"Google Sheets client initialized ({threading.current_thread().name})")
        return service.spreadsheets().values()

    def get_values(self, range_: str) -> List[List[str]]:
        try:
            result = self._values().get(spreadsheetId=self.sheet_id, range=range_).execute()
        except HttpError as e:
            raise SheetsAccessError(f"Error leyendo {range_}: {e}", range_) from e
        return result.get("values", [])

    def append_values(self, range_: str, rows: List[List]) -> None:
        try:
            self._values().append(
                spreadsheetId=self.sheet_id,
                range=range_,
                valueInputOption=VALUE_INPUT_OPTION,
                body={"values": rows},
            ).execute()
        except HttpError as e:
            raise SheetsAccessError(f"Error agregando filas en {range_}: {e}", range_) from e

    def update_values(self, range_: str, rows: List[List]) -> None:
        try:
            self._values().update(
                spreadsheetId=self.sheet_id,
                range=range_,
                valueInputOption=VALUE_INPUT_OPTION,
                body={"values": rows},
            ).execute()
        except HttpError as e:
            raise SheetsAccessError(f"Error actualizando {range_}: {e}", range_) from e
