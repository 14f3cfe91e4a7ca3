# ===================================
# app/api/deps.py
# ===================================
from fastapi import HTTPException, status

from app.services.exceptions import (
    StoreError,
    NotFoundError,
    ConflictError,
)


def to_http_exception(exc: StoreError) -> HTTPException:
    """
    Traduire une erreur métier en réponse HTTP
    """
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ConflictError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))


def get_pagination_params(
    skip: int = 0,
    limit: int = 20
) -> tuple[int, int]:
    """
    Paramètres de pagination communs
    """
    if skip < 0:
        skip = 0
    if limit < 1:
        limit = 1
    if limit > 100:
        limit = 100

    return skip, limit
