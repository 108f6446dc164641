"""
Structured results returned by service operations.

Business-rule violations are returned as a BusinessError (symbolic code +
named params) instead of being raised, so the caller can re-offer the same
input with the violation rendered in the admin's language.
"""
from typing import Any, Dict, NamedTuple, Optional


# Error codes
MAX_OCCUPANTS = "MAX_OCCUPANTS"
DUPLICATE_OCCUPANT_IDS = "DUPLICATE_OCCUPANT_IDS"
DUPLICATE_ID = "DUPLICATE_ID"
TENANT_HAS_ACTIVE_CONTRACTS = "TENANT_HAS_ACTIVE_CONTRACTS"
ROOM_NOT_VACANT = "ROOM_NOT_VACANT"
TENANT_HAS_ACTIVE_CONTRACT = "TENANT_HAS_ACTIVE_CONTRACT"
ROOM_STATUS_LOCKED = "ROOM_STATUS_LOCKED"


class BusinessError(NamedTuple):
    code: str
    params: Dict[str, Any] = {}


class ServiceResult(NamedTuple):
    ok: bool
    value: Any = None
    error: Optional[BusinessError] = None


def success(value: Any = None) -> ServiceResult:
    return ServiceResult(ok=True, value=value)


def failure(code: str, **params) -> ServiceResult:
    return ServiceResult(ok=False, error=BusinessError(code, params))
