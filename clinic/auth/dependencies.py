from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from clinic.auth.gate import AuthorizationGate, Identity, Rejected, Role
from clinic.database import get_db
from clinic.repositories import DoctorRepository, PatientRepository
from clinic.scheduling.results import INTERNAL_ERROR

security = HTTPBearer()


def get_gate(db: Session = Depends(get_db)) -> AuthorizationGate:
    return AuthorizationGate(DoctorRepository(db), PatientRepository(db))


def require_role(*roles: Role):
    """Dependency factory: the first role the token satisfies wins."""

    def _verify(
        credentials: HTTPAuthorizationCredentials = Depends(security),
        gate: AuthorizationGate = Depends(get_gate),
    ) -> Identity:
        verdict: Identity | Rejected = Rejected("invalid_token")
        for role in roles:
            verdict = gate.verify(credentials.credentials, role)
            if isinstance(verdict, Identity):
                return verdict
            if verdict.reason == INTERNAL_ERROR:
                raise HTTPException(status_code=500, detail="Internal server error.")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return _verify
