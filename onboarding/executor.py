import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from onboarding.errors import RoleAssignmentFailed, UnknownPrincipal, UnknownResourceType
from onboarding.manifest import GrantRequest
from onboarding.scopes import resolve_scope

logger = logging.getLogger(__name__)


class GrantStatus(str, Enum):
    GRANTED = "Granted"
    FAILED = "Failed"


@dataclass(frozen=True)
class GrantOutcome:
    request: GrantRequest
    status: GrantStatus
    detail: str = ""
    error: Optional[str] = None  # Name der Fehlerklasse bei FAILED
    scope: Optional[str] = None
    job_id: str = ""

    @property
    def granted(self) -> bool:
        return self.status is GrantStatus.GRANTED

    def as_record(self) -> dict:
        return {
            "job_id": self.job_id,
            "line": self.request.line,
            "resource_type": self.request.resource_type,
            "resource_name": self.request.resource_name,
            "role": self.request.role,
            "resource_group_name": self.request.resource_group_name,
            "scope": self.scope,
            "status": self.status.value,
            "error": self.error,
            "detail": self.detail,
        }


def failed(request: GrantRequest, error: Exception, scope: Optional[str] = None, job_id: str = "") -> GrantOutcome:
    return GrantOutcome(
        request=request,
        status=GrantStatus.FAILED,
        detail=str(error),
        error=type(error).__name__,
        scope=scope,
        job_id=job_id,
    )


def execute_grant(request: GrantRequest, user_principal_name: str, subscription_id: str,
                  directory, assigner, job_id: str = "") -> GrantOutcome:
    """Führt eine einzelne Manifestzeile aus.

    Reihenfolge: Prinzipal auflösen, Scope bestimmen, Rolle zuweisen. Jeder
    Fehler endet in einem FAILED-Ergebnis; die Rollenzuweisung wird nur
    aufgerufen, wenn Prinzipal und Scope aufgelöst werden konnten.
    """
    try:
        principal_id = directory.resolve_principal(user_principal_name)
    except UnknownPrincipal as e:
        logger.error(f"Zeile {request.line}: {e}")
        return failed(request, e, job_id=job_id)

    try:
        scope = resolve_scope(
            request.resource_type, subscription_id, request.resource_group_name, request.resource_name
        )
    except UnknownResourceType as e:
        logger.error(f"Zeile {request.line}: {e}")
        return failed(request, e, job_id=job_id)

    logger.info(f"Weise Rolle '{request.role}' auf {scope} zu")
    try:
        detail = assigner.assign_role(principal_id, request.role, scope)
    except RoleAssignmentFailed as e:
        logger.error(f"Rollenzuweisung '{request.role}' auf {scope} fehlgeschlagen: {e.detail}")
        return failed(request, e, scope=scope, job_id=job_id)

    return GrantOutcome(
        request=request,
        status=GrantStatus.GRANTED,
        detail=detail or "",
        scope=scope,
        job_id=job_id,
    )
