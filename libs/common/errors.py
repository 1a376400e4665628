"""Domain errors raised by store services.

Each one is an ``HTTPException`` so FastAPI renders it without extra
handlers, while service code and tests can still catch it by type.
"""

from typing import Optional

from fastapi import HTTPException, status


class StoreError(HTTPException):
    """Base class for store domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Requisição inválida"

    def __init__(
        self, detail: Optional[str] = None, headers: Optional[dict] = None
    ) -> None:
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(StoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Dados inválidos"


class NotFoundError(StoreError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Recurso não encontrado"


class ForbiddenError(StoreError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Acesso negado"


class ConflictError(StoreError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflito ao gravar, tente novamente"


class EmptyCartError(StoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Carrinho está vazio"


class InsufficientStockError(StoreError):
    """Requested quantity exceeds what is available to sell."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, available: int, detail: Optional[str] = None) -> None:
        self.available = available
        super().__init__(
            detail or f"Estoque insuficiente. Disponível: {available}",
            headers={"X-Available-Quantity": str(available)},
        )
