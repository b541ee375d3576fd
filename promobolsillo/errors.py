class PromobolsilloError(Exception):
    """Base de los errores propios del bot."""


class SheetsConfigError(PromobolsilloError):
    """Falta SHEET_ID o GOOGLE_SERVICE_ACCOUNT_JSON (o el JSON no es válido)."""


class SheetsAccessError(PromobolsilloError):
    """La API de Google Sheets respondió con error (cuota, permisos, rango inválido...)."""

    def __init__(self, message: str, range_: str = ""):
        super().__init__(message)
        self.range = range_
