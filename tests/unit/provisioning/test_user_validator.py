import pytest

from cirplane.src.api.models.user_models import CreateUserRequest
from cirplane.src.provisioning.validation.user_validator import UserValidator


@pytest.fixture
def validator() -> UserValidator:
    return UserValidator(min_password_length=6)


def test_valid_admin(validator):
    assert validator.validate_create_request(CreateUserRequest(email="admin@cirplane.com", name="Admin", role="admin")) == []


@pytest.mark.parametrize("payload", [
    {"name": "Sem Email", "role": "admin"},
    {"email": "a@b.com", "role": "admin"},
    {"email": "a@b.com", "name": "Sem Role"},
    {"email": "   ", "name": "Blank", "role": "admin"},
])
def test_missing_required_fields(validator, payload):
    assert validator.validate_create_request(CreateUserRequest(**payload)) == ["Campos obrigatórios: email, name, role"]


@pytest.mark.parametrize("email", ["plainaddress", "no-at.com", "a@b", "a b@c.com", "a@b .com"])
def test_invalid_email(validator, email):
    errors = validator.validate_create_request(CreateUserRequest(email=email, name="X", role="admin"))
    assert errors[0] == "Email inválido"


def test_invalid_role(validator):
    errors = validator.validate_create_request(CreateUserRequest(email="a@b.com", name="X", role="nurse"))
    assert errors == ["Role deve ser: admin, doctor ou secretary"]


def test_doctor_needs_crm_and_specialty(validator):
    errors = validator.validate_create_request(
        CreateUserRequest(email="a@b.com", name="Dr", role="doctor", crm="123")
    )
    assert errors == ["Médicos precisam de CRM e especialidade"]


def test_secretary_needs_doctor_id(validator):
    errors = validator.validate_create_request(CreateUserRequest(email="a@b.com", name="Sec", role="secretary"))
    assert errors == ["Secretárias precisam de doctor_id"]


def test_short_password_rejected_but_empty_means_generate(validator):
    short = validator.validate_create_request(CreateUserRequest(email="a@b.com", name="X", role="admin", password="123"))
    empty = validator.validate_create_request(CreateUserRequest(email="a@b.com", name="X", role="admin", password=""))

    assert short == ["A senha deve ter pelo menos 6 caracteres"]
    assert empty == []


def test_errors_are_reported_in_check_order(validator):
    errors = validator.validate_create_request(CreateUserRequest(email="bad", name="X", role="doctor"))
    assert errors == ["Email inválido", "Médicos precisam de CRM e especialidade"]
