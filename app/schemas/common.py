# ===================================
# app/schemas/common.py
# ===================================
"""
Éléments partagés par les schémas : format des violations de validation
et enveloppes de réponse.

Une violation est un dictionnaire `{"field", "message", "location"}` ; la même
forme est renvoyée par l'API (HTTP 400) et par `collect_violations`, qui permet
de valider un payload brut sans lever d'exception.
"""

from typing import Any, Iterable, List, Type

from pydantic import BaseModel, ValidationError

REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie")


class Violation(BaseModel):
    field: str
    message: str
    location: str = "body"


class ValidationErrorResponse(BaseModel):
    success: bool = False
    message: str = "Validation failed"
    errors: List[Violation]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def _clean_message(message: str) -> str:
    # Pydantic préfixe les ValueError levées par les validateurs
    for prefix in ("Value error, ", "Assertion failed, "):
        if message.startswith(prefix):
            return message[len(prefix):]
    return message


def violations_from_errors(errors: Iterable[dict], default_location: str = "body") -> List[dict]:
    """Convertir des erreurs Pydantic (`exc.errors()`) en violations"""
    violations = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        location = default_location
        if loc and loc[0] in REQUEST_LOCATIONS:
            location = loc.pop(0)
        violations.append({
            "field": ".".join(loc) or "__root__",
            "message": _clean_message(error.get("msg", "Invalid value")),
            "location": location,
        })
    return violations


def collect_violations(schema: Type[BaseModel], payload: Any) -> List[dict]:
    """
    Valider `payload` avec `schema` et retourner la liste des violations.
    Une liste vide signifie que le payload est valide.
    """
    if not isinstance(payload, dict):
        return [{"field": "__root__", "message": "Payload must be an object", "location": "body"}]
    try:
        schema(**payload)
    except ValidationError as exc:
        return violations_from_errors(exc.errors())
    return []


def pagination_meta(total: int, skip: int, limit: int) -> dict:
    return {
        "total": total,
        "page": (skip // limit) + 1 if limit else 1,
        "per_page": limit,
        "has_more": (skip + limit) < total,
    }
