# src/core/exceptions.py


class AuthError(Exception):
    """Requisição sem autorização para disparar o processamento."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class FatalQueryError(Exception):
    """Não foi possível nem ler as recorrências vencidas. Aborta a execução inteira."""
