"""
Fixtures de prueba: una hoja de cálculo en memoria que entiende los rangos A1
que usa el bot, un cliente de Twilio falso y catálogos de ejemplo.
"""

import re
from collections import defaultdict
from contextlib import nullcontext
from types import SimpleNamespace

import pytest
from twilio.base.exceptions import TwilioRestException

from promobolsillo.bot import Bot
from promobolsillo.errors import SheetsAccessError
from promobolsillo.messages import InboundMessage

RANGE_RE = re.compile(r"^(?P<sheet>[^!]+)!(?P<c1>[A-Z]+)(?P<r1>\d+):(?P<c2>[A-Z]+)(?P<r2>\d*)$")

PROMOTER = "+5215500000001"
PROMOTER_2 = "+5215500000002"
SUPERVISOR = "+5215599999999"
TWILIO_FROM = "whatsapp:+14155238886"


def col_index(letters: str) -> int:
    n = 0
    for ch in letters:
        n = n * 26 + (ord(ch) - 64)
    return n - 1


def to_cell(value) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


class FakeSheets:
    """Hojas como listas de filas de datos; la fila i de datos es la fila i+2 de la hoja."""

    def __init__(self, fail: bool = False):
        self.tables = defaultdict(list)
        self.fail = fail

    def _parse(self, range_):
        if self.fail:
            raise SheetsAccessError(f"Error leyendo {range_}: 503", range_)
        m = RANGE_RE.match(range_)
        assert m, f"rango inesperado: {range_}"
        r2 = int(m.group("r2")) if m.group("r2") else None
        return m.group("sheet"), col_index(m.group("c1")), int(m.group("r1")), col_index(m.group("c2")), r2

    def seed(self, sheet, rows):
        self.tables[sheet] = [[to_cell(v) for v in r] for r in rows]

    def rows(self, sheet):
        return self.tables.get(sheet, [])

    def get_values(self, range_):
        sheet, c1, r1, c2, r2 = self._parse(range_)
        rows = self.tables.get(sheet, [])
        start = r1 - 2
        end = (r2 - 2) if r2 else len(rows) - 1
        out = []
        for row in rows[start:end + 1]:
            values = row[c1:c2 + 1]
            # Sheets recorta las celdas vacías al final de la fila
            while values and values[-1] == "":
                values.pop()
            out.append(values)
        while out and not out[-1]:
            out.pop()
        return out

    def append_values(self, range_, rows):
        sheet, *_ = self._parse(range_)
        self.tables[sheet].extend([to_cell(v) for v in r] for r in rows)

    def update_values(self, range_, rows):
        sheet, c1, r1, _, _ = self._parse(range_)
        table = self.tables[sheet]
        for i, values in enumerate(rows):
            index = r1 - 2 + i
            while len(table) <= index:
                table.append([])
            row = table[index]
            for j, value in enumerate(values):
                col = c1 + j
                while len(row) <= col:
                    row.append("")
                row[col] = to_cell(value)


class NumericPhoneSheets(FakeSheets):
    """Como una hoja con USER_ENTERED: "+5215..." se guarda como el número 5215..."""

    NUMERIC_RE = re.compile(r"^\+\d+$")

    def _coerce(self, rows):
        return [[v[1:] if isinstance(v, str) and self.NUMERIC_RE.match(v) else v for v in r] for r in rows]

    def append_values(self, range_, rows):
        super().append_values(range_, self._coerce(rows))

    def update_values(self, range_, rows):
        super().update_values(range_, self._coerce(rows))


class FakeMessages:
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def create(self, **kwargs):
        if kwargs["to"] in self.fail_for:
            raise TwilioRestException(400, "/Messages.json", msg="número inválido")
        self.sent.append(kwargs)
        return SimpleNamespace(sid=f"SM{len(self.sent):04d}")


class FakeTwilio:
    def __init__(self, fail_for=()):
        self.messages = FakeMessages(fail_for)


class FakeRedis:
    def __init__(self):
        self.keys = {}

    def set(self, key, value, nx=False, ex=None):
        if nx and key in self.keys:
            return None
        self.keys[key] = value
        return True

    def delete(self, key):
        self.keys.pop(key, None)

    def lock(self, name, timeout=None, blocking_timeout=None):
        return nullcontext()


def seed_catalogs(sheets: FakeSheets) -> None:
    sheets.seed("PROMOTORES", [
        [PROMOTER, "P001", "Ana", "CENTRO", "WALMART", "TRUE", SUPERVISOR],
        [PROMOTER_2, "P002", "Luis", "CENTRO", "SORIANA", "TRUE", SUPERVISOR],
    ])
    sheets.seed("SUPERVISORES", [
        [SUPERVISOR, "S001", "Carla", "CENTRO", "regional", "TRUE"],
    ])
    sheets.seed("TIENDAS", [
        ["T001", "Walmart Centro", "WALMART", "CDMX", "CENTRO", "TRUE"],
        ["T002", "Soriana Norte", "SORIANA", "Monterrey", "NORTE", "TRUE"],
    ])
    sheets.seed("MARCAS", [
        ["M001", "Marca Uno", "Cliente Uno", "TRUE"],
        ["M002", "Marca Dos", "Cliente Dos", "TRUE"],
    ])
    sheets.seed("TIENDA_MARCA", [
        ["T001", "M002", "1", "TRUE"],
        ["T001", "M001", "2", "TRUE"],
    ])
    sheets.seed("PRODUCTOS", [
        ["PR1", "7501000000011", "Galletas 200g", "GALLETAS", "M001", "TRUE", "25"],
        ["PR2", "7501000000028", "Cereal 500g", "CEREAL", "M001", "FALSE", "55"],
        ["PR3", "7501000000035", "Jugo 1L", "BEBIDAS", "M002", "TRUE", "30"],
    ])
    sheets.seed("ACTIVIDADES_COMPETENCIA", [
        ["AC1", "Competidor X", "Degustación", "Degustación en pasillo", "2"],
        ["AC2", "Competidor X", "Precio bajo", "Precio por debajo del sugerido", "0"],
        ["AC3", "Competidor Y", "Exhibidor", "Exhibidor adicional", "3"],
    ])
    sheets.seed("GRUPOS_CLIENTE", [
        ["G1", "Grupo Cliente Uno", "Cliente Uno", "+5215511111111, +5215522222222", "TRUE"],
        ["G2", "Grupo inactivo", "Cliente Dos", "+5215533333333", "FALSE"],
    ])
    sheets.seed("RETOS", [
        ["R1", "¿Cuál es el precio sugerido de Galletas 200g?", "$20", "$25", "$30", "2", "5", "0", "TRUE"],
        ["R2", "¿Qué va primero en el anaquel?", "Lo nuevo", "Lo que caduca antes", "Lo más caro", "2", "3", "-1", "TRUE"],
        ["R3", "Reto desactivado", "a", "b", "c", "1", "10", "0", "FALSE"],
    ])


@pytest.fixture
def sheets():
    s = FakeSheets()
    seed_catalogs(s)
    return s


@pytest.fixture
def twilio_client():
    return FakeTwilio()


@pytest.fixture
def bot(sheets, twilio_client):
    return Bot(sheets, twilio_client, TWILIO_FROM)


class Chat:
    """Envía mensajes al bot como si llegaran del webhook."""

    def __init__(self, bot):
        self.bot = bot

    def send(self, phone, body="", media_url="", lat="", lon=""):
        msg = InboundMessage(
            phone=phone,
            body=body,
            num_media=1 if media_url else 0,
            media_url=media_url,
            media_type="image/jpeg" if media_url else "",
            latitude=lat,
            longitude=lon,
        )
        return self.bot.handle(msg)

    def say(self, phone, body="", media_url="", lat="", lon="") -> str:
        return "\n".join(r.text for r in self.send(phone, body, media_url, lat, lon))

    def state(self, phone) -> str:
        return self.bot.sessions.load(phone).state


@pytest.fixture
def chat(bot):
    return Chat(bot)
