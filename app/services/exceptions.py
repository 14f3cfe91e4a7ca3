# ===================================
# app/services/exceptions.py
# ===================================
"""Exceptions métier levées par les services et traduites en HTTP par les routes."""


class StoreError(Exception):
    """Erreur métier de base"""


class NotFoundError(StoreError):
    pass


class ConflictError(StoreError):
    pass


class CouponNotFoundError(NotFoundError):
    def __init__(self, code: str):
        super().__init__(f"Coupon '{code}' introuvable")
        self.code = code


class CouponAlreadyExistsError(ConflictError):
    def __init__(self, code: str):
        super().__init__(f"Un coupon avec le code '{code}' existe déjà")
        self.code = code


class CouponUsageLimitReachedError(ConflictError):
    def __init__(self, code: str):
        super().__init__(f"Le coupon '{code}' a atteint sa limite d'utilisation")
        self.code = code


class CategoryInUseError(ConflictError):
    pass


class InvalidCouponError(StoreError):
    pass
