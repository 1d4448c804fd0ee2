import re
from typing import List, Optional
import structlog

from ...api.models.user_models import CreateUserRequest, UserRole

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class UserValidator:
    def __init__(self, min_password_length: int = 6):
        self.min_password_length = min_password_length

    def validate_create_request(self, request: CreateUserRequest) -> List[str]:
        """
        Validates an admin create-user request.
        Returns error messages in the order they are checked; callers report the first.
        An empty list means the request is valid.
        """
        errors: List[str] = []

        if _blank(request.email) or _blank(request.name) or _blank(request.role):
            errors.append("Campos obrigatórios: email, name, role")
            logger.debug("User validation failed", errors=errors)
            return errors

        if not EMAIL_PATTERN.match(request.email.strip()):
            errors.append("Email inválido")

        try:
            role = UserRole(request.role.strip())
        except ValueError:
            role = None
            errors.append("Role deve ser: admin, doctor ou secretary")

        if role == UserRole.DOCTOR and (_blank(request.crm) or _blank(request.specialty)):
            errors.append("Médicos precisam de CRM e especialidade")

        if role == UserRole.SECRETARY and _blank(request.doctor_id):
            errors.append("Secretárias precisam de doctor_id")

        # A supplied password must be usable; an absent one is generated later.
        if request.password and len(request.password) < self.min_password_length:
            errors.append(f"A senha deve ter pelo menos {self.min_password_length} caracteres")

        if errors:
            logger.debug("User validation failed", errors=errors)
        else:
            logger.debug("User validation successful", email=request.email.strip(), role=role.value)

        return errors
