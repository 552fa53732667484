"""Token verification for the scheduling core.

``verify`` is the only entry point. It returns an ``Identity`` or a
``Rejected`` value and never raises, so callers compose it as a pre-check
before any data access. A failed subject lookup comes back as
``Rejected("internal_error")``.
"""

import logging
from dataclasses import dataclass
from enum import Enum

import jwt
from sqlalchemy.exc import SQLAlchemyError

from clinic.auth import jwt_handler
from clinic.core import config
from clinic.scheduling.ports import DoctorLookup, PatientLookup
from clinic.scheduling.results import INTERNAL_ERROR

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"


@dataclass(frozen=True)
class Identity:
    email: str
    role: Role


@dataclass(frozen=True)
class Rejected:
    reason: str


class AuthorizationGate:
    def __init__(self, doctors: DoctorLookup, patients: PatientLookup, admin_username: str | None = None):
        self.doctors = doctors
        self.patients = patients
        self.admin_username = admin_username or config.ADMIN_USERNAME

    def verify(self, token: str, expected_role: Role | str) -> Identity | Rejected:
        expected_role = Role(expected_role)

        try:
            payload = jwt_handler.decode_access_token(token)
        except jwt.PyJWTError:
            return Rejected("invalid_token")

        subject = payload.get("sub")
        if not subject:
            return Rejected("invalid_token")

        if payload.get("role") != expected_role.value:
            return Rejected("wrong_role")

        try:
            known = self._subject_exists(subject, expected_role)
        except SQLAlchemyError:
            logger.exception("Subject lookup failed for %s token", expected_role.value)
            return Rejected(INTERNAL_ERROR)

        if not known:
            logger.info("Rejected token for unknown %s subject", expected_role.value)
            return Rejected("unknown_subject")

        return Identity(email=subject, role=expected_role)

    def _subject_exists(self, subject: str, role: Role) -> bool:
        if role is Role.ADMIN:
            return subject == self.admin_username
        if role is Role.DOCTOR:
            return self.doctors.find_by_email(subject) is not None
        return self.patients.find_by_email(subject) is not None
