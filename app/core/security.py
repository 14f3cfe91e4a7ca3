# ===================================
# app/core/security.py
# ===================================

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Union, List, Optional
from jose import jwt, JWTError
from fastapi import HTTPException, status, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings

# Configuration du bearer token
security = HTTPBearer()

# Scopes/permissions pour l'autorisation
SCOPES = {
    "products:write": "Écrire les produits",
    "categories:write": "Écrire les catégories",
    "coupons:read": "Lire les coupons",
    "coupons:write": "Écrire les coupons",
    "orders:write": "Confirmer les commandes (utilisation des coupons)",
    "admin": "Accès administrateur complet",
}


@dataclass
class Principal:
    """Identité extraite d'un token vérifié"""
    subject: str
    scopes: List[str] = field(default_factory=list)

    def has_scope(self, scope: str) -> bool:
        return "admin" in self.scopes or scope in self.scopes


def create_access_token(
    subject: Union[str, Any],
    expires_delta: timedelta = None,
    scopes: List[str] = None
) -> str:
    """Créer un token d'accès JWT (outillage et tests ; l'émission relève du service d'auth)"""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.jwt_access_token_expire_minutes
        )

    to_encode = {
        "exp": expire,
        "sub": str(subject),
        "scopes": scopes or []
    }
    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def decode_token(token: str) -> dict:
    """Décoder et valider un token JWT"""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token invalide",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> Principal:
    """Obtenir l'identité courante à partir du token"""
    payload = decode_token(credentials.credentials)
    subject: Optional[str] = payload.get("sub")
    if subject is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Impossible de valider les credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Principal(subject=subject, scopes=list(payload.get("scopes", [])))


def require_scope(required_scope: str):
    """Dépendance qui vérifie les permissions/scopes"""
    if required_scope not in SCOPES:
        raise ValueError(f"Scope inconnu: {required_scope}")

    def scope_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        # L'admin a accès à tout
        if not principal.has_scope(required_scope):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission manquante: {required_scope}"
            )
        return principal

    return scope_checker
