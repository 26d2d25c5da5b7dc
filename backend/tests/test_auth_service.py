"""
Registration, login and profile management.
"""

import pytest

from coursehub.core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationFailedError
from coursehub.core.security import identity_from_token, verify_password


pytestmark = pytest.mark.anyio


REGISTRATION = {
    "name": "Nina Teacher",
    "email": "Nina@Coursehub.io",
    "password": "correct-horse",
    "role": "teacher",
}


async def test_register_returns_user_and_verifiable_token(services, settings):
    user, token = await services.auth.register(REGISTRATION)

    assert user.email == "nina@coursehub.io"
    assert user.role == "teacher"
    assert verify_password("correct-horse", user.hashed_password)

    identity = identity_from_token(settings, token)
    assert identity.account_id == user.id
    assert identity.role == "teacher"


async def test_register_duplicate_email_ignores_case(services):
    await services.auth.register(REGISTRATION)

    with pytest.raises(ConflictError):
        await services.auth.register({**REGISTRATION, "email": "NINA@coursehub.io"})


async def test_register_rejects_malformed_input(services):
    with pytest.raises(ValidationFailedError) as exc_info:
        await services.auth.register({**REGISTRATION, "password": "123"})

    assert "password" in exc_info.value.message


async def test_login(services):
    user, _ = await services.auth.register(REGISTRATION)

    logged_in, token = await services.auth.login({"email": "nina@coursehub.io", "password": "correct-horse"})

    assert logged_in.id == user.id
    assert token


@pytest.mark.parametrize("email, password", [
    ("nina@coursehub.io", "wrong-password"),
    ("nobody@coursehub.io", "correct-horse"),
])
async def test_login_with_bad_credentials(services, email, password):
    await services.auth.register(REGISTRATION)

    with pytest.raises(AuthenticationError) as exc_info:
        await services.auth.login({"email": email, "password": password})

    assert exc_info.value.message == "Invalid email or password"


async def test_update_profile_cannot_change_role(services):
    user, _ = await services.auth.register(REGISTRATION)

    updated = await services.auth.update_profile(user.id, {"name": "Nina T.", "role": "student"})

    assert updated.name == "Nina T."
    assert updated.role == "teacher"


async def test_update_profile_email_must_stay_unique(services):
    user, _ = await services.auth.register(REGISTRATION)
    await services.auth.register({**REGISTRATION, "email": "other@coursehub.io"})

    with pytest.raises(ConflictError):
        await services.auth.update_profile(user.id, {"email": "other@coursehub.io"})


async def test_change_password(services):
    user, _ = await services.auth.register(REGISTRATION)

    with pytest.raises(AuthenticationError):
        await services.auth.change_password(
            user.id, {"current_password": "nope", "new_password": "battery-staple"}
        )

    await services.auth.change_password(
        user.id, {"current_password": "correct-horse", "new_password": "battery-staple"}
    )
    await services.auth.login({"email": "nina@coursehub.io", "password": "battery-staple"})


async def test_profile_of_missing_user(services):
    with pytest.raises(NotFoundError):
        await services.auth.get_profile("missing")
