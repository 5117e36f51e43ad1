"""
Name: Error Mapping Tests

Responsibilities:
  - Validate use case error codes -> HTTP status / RFC7807 code
"""

import pytest

from taller_charli.application.usecases.auth import AuthError, AuthErrorCode
from taller_charli.application.usecases.users import UserError, UserErrorCode
from taller_charli.crosscutting.error_responses import AppHTTPException, ErrorCode
from taller_charli.interfaces.api.http.error_mapping import (
    raise_auth_error,
    raise_user_error,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "code,status,error_code",
    [
        (UserErrorCode.VALIDATION_ERROR, 400, ErrorCode.VALIDATION_ERROR),
        (UserErrorCode.BAD_REQUEST, 400, ErrorCode.BAD_REQUEST),
        (UserErrorCode.UNAUTHENTICATED, 401, ErrorCode.UNAUTHORIZED),
        (UserErrorCode.FORBIDDEN, 403, ErrorCode.FORBIDDEN),
        (UserErrorCode.NOT_FOUND, 404, ErrorCode.NOT_FOUND),
        (UserErrorCode.CONFLICT, 409, ErrorCode.CONFLICT),
        (UserErrorCode.INTERNAL, 500, ErrorCode.INTERNAL_ERROR),
    ],
)
def test_user_error_mapping(code, status, error_code):
    with pytest.raises(AppHTTPException) as exc_info:
        raise_user_error(UserError(code=code, message="mensaje"))

    assert exc_info.value.status_code == status
    assert exc_info.value.code == error_code
    assert exc_info.value.detail == "mensaje"


def test_auth_unauthenticated_is_401_with_challenge():
    with pytest.raises(AppHTTPException) as exc_info:
        raise_auth_error(AuthError(AuthErrorCode.UNAUTHENTICATED, "Credenciales inválidas"))

    assert exc_info.value.status_code == 401
    assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}


def test_auth_bad_request_is_400():
    with pytest.raises(AppHTTPException) as exc_info:
        raise_auth_error(AuthError(AuthErrorCode.BAD_REQUEST, "Error al crear usuario"))

    assert exc_info.value.status_code == 400
    assert exc_info.value.code == ErrorCode.BAD_REQUEST
