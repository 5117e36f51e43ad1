"""
Name: Fake Identity Provider Tests

Responsibilities:
  - Keep the in-memory provider faithful to the IdentityProvider contract
"""

import pytest

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


async def test_sign_in_requires_matching_password(identity_provider):
    identity_provider.add_account("a@example.com", "secret1")

    assert await identity_provider.sign_in("a@example.com", "wrong") is None
    session = await identity_provider.sign_in("a@example.com", "secret1")
    assert session.identity.email == "a@example.com"


async def test_sign_up_rejects_existing_email(identity_provider):
    first = await identity_provider.sign_up("a@example.com", "secret1")

    assert first.session is not None
    assert await identity_provider.sign_up("a@example.com", "other") is None


async def test_issued_tokens_verify_until_sign_out(identity_provider):
    token = identity_provider.issue_token("a@example.com")

    assert (await identity_provider.verify(token)).email == "a@example.com"
    await identity_provider.sign_out(token)
    assert await identity_provider.verify(token) is None


async def test_refresh_rotates_tokens(identity_provider):
    identity_provider.add_account("a@example.com", "secret1")
    session = await identity_provider.sign_in("a@example.com", "secret1")

    rotated = await identity_provider.refresh(session.refresh_token)

    assert rotated.refresh_token != session.refresh_token
    assert await identity_provider.refresh(session.refresh_token) is None


async def test_delete_identity_invalidates_tokens(identity_provider):
    identity = identity_provider.add_account("a@example.com", "secret1")
    session = await identity_provider.sign_in("a@example.com", "secret1")

    assert await identity_provider.delete_identity(identity.id) is True
    assert await identity_provider.verify(session.access_token) is None
    assert await identity_provider.delete_identity(identity.id) is False
