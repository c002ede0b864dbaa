"""
ResilienceHub Backend — Access-Scope Resolver Unit Tests
========================================================

What:  The canonical admin → self → therapist-of-client → deny procedure.
How:   The user repository is an AsyncMock; no database involved.

What we test:
    ✅ Self access for every role
    ✅ Admin bypass, including nonexistent targets
    ✅ Therapist scoped to their own clients
    ✅ Clients denied on anyone else (without a lookup)
    ✅ Read vs create denial messages
    ✅ Therapist self-target exclusion for feedback operations
    ✅ A failed target lookup is a DatabaseError, never a denial
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from resilience_hub.auth.context import Principal
from resilience_hub.exceptions import AuthorizationError, DatabaseError
from resilience_hub.models import Role
from resilience_hub.services.access_control import AccessPurpose, AccessResolver

THERAPIST_ID = 3
CLIENT_ID = 10
OTHER_CLIENT_ID = 99
FEEDBACK_EXCLUSION = "As a therapist, you can only provide feedback on goals."


def make_principal(user_id: int, role: Role) -> Principal:
    return Principal(
        id=user_id,
        username=f"user{user_id}",
        email=f"user{user_id}@example.com",
        name=f"User {user_id}",
        role=role,
        status="active",
    )


@pytest.fixture
def users():
    clients = {
        CLIENT_ID: SimpleNamespace(id=CLIENT_ID, therapist_id=THERAPIST_ID),
        OTHER_CLIENT_ID: SimpleNamespace(id=OTHER_CLIENT_ID, therapist_id=7),
    }
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(side_effect=lambda user_id: clients.get(user_id))
    return repo


@pytest.fixture
def resolver(users):
    return AccessResolver(users)


class TestSelfAccess:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", list(Role))
    async def test_self_access_allowed_for_every_role(self, resolver, users, role):
        decision = await resolver.decide(make_principal(42, role), 42)
        assert decision.allowed
        users.get_by_id.assert_not_awaited()


class TestAdminBypass:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", [CLIENT_ID, OTHER_CLIENT_ID, 12345])
    async def test_admin_allowed_on_any_target(self, resolver, users, target):
        decision = await resolver.decide(make_principal(1, Role.ADMIN), target)
        assert decision.allowed
        users.get_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_unaffected_by_feedback_exclusion(self, resolver):
        decision = await resolver.decide(
            make_principal(1, Role.ADMIN), 1, therapist_self_exclusion=FEEDBACK_EXCLUSION
        )
        assert decision.allowed


class TestTherapistScoping:

    @pytest.mark.asyncio
    async def test_own_client_allowed(self, resolver):
        decision = await resolver.decide(make_principal(THERAPIST_ID, Role.THERAPIST), CLIENT_ID)
        assert decision.allowed

    @pytest.mark.asyncio
    async def test_other_therapists_client_denied(self, resolver):
        decision = await resolver.decide(
            make_principal(THERAPIST_ID, Role.THERAPIST), OTHER_CLIENT_ID
        )
        assert not decision.allowed
        assert decision.reason == "Access denied. Not your client."

    @pytest.mark.asyncio
    async def test_missing_target_denied_like_unrelated_user(self, resolver):
        decision = await resolver.decide(make_principal(THERAPIST_ID, Role.THERAPIST), 5555)
        assert not decision.allowed
        assert decision.reason == "Access denied. Not your client."

    @pytest.mark.asyncio
    async def test_create_purpose_uses_creation_message(self, resolver):
        decision = await resolver.decide(
            make_principal(THERAPIST_ID, Role.THERAPIST),
            OTHER_CLIENT_ID,
            purpose=AccessPurpose.CREATE,
        )
        assert decision.reason == (
            "Access denied. You can only create resources for your own clients."
        )

    @pytest.mark.asyncio
    async def test_lookup_failure_is_database_error(self, resolver, users):
        users.get_by_id.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        with pytest.raises(DatabaseError):
            await resolver.decide(make_principal(THERAPIST_ID, Role.THERAPIST), CLIENT_ID)


class TestClientExclusion:

    @pytest.mark.asyncio
    async def test_client_denied_on_other_user(self, resolver, users):
        decision = await resolver.decide(make_principal(CLIENT_ID, Role.CLIENT), OTHER_CLIENT_ID)
        assert not decision.allowed
        assert decision.reason == "Access denied."
        users.get_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_client_denied_on_own_therapist(self, resolver):
        decision = await resolver.decide(make_principal(CLIENT_ID, Role.CLIENT), THERAPIST_ID)
        assert not decision.allowed

    @pytest.mark.asyncio
    async def test_client_create_message(self, resolver):
        decision = await resolver.decide(
            make_principal(CLIENT_ID, Role.CLIENT), OTHER_CLIENT_ID, purpose=AccessPurpose.CREATE
        )
        assert decision.reason == "Access denied. You can only create resources for yourself."


class TestFeedbackExclusion:

    @pytest.mark.asyncio
    async def test_therapist_denied_on_own_record(self, resolver):
        decision = await resolver.decide(
            make_principal(THERAPIST_ID, Role.THERAPIST),
            THERAPIST_ID,
            therapist_self_exclusion=FEEDBACK_EXCLUSION,
        )
        assert not decision.allowed
        assert decision.reason == FEEDBACK_EXCLUSION

    @pytest.mark.asyncio
    async def test_therapist_still_allowed_on_client_record(self, resolver):
        decision = await resolver.decide(
            make_principal(THERAPIST_ID, Role.THERAPIST),
            CLIENT_ID,
            therapist_self_exclusion=FEEDBACK_EXCLUSION,
        )
        assert decision.allowed

    @pytest.mark.asyncio
    async def test_client_owner_unaffected(self, resolver):
        decision = await resolver.decide(
            make_principal(CLIENT_ID, Role.CLIENT),
            CLIENT_ID,
            therapist_self_exclusion=FEEDBACK_EXCLUSION,
        )
        assert decision.allowed


class TestRequire:

    @pytest.mark.asyncio
    async def test_require_raises_forbidden_with_reason(self, resolver):
        with pytest.raises(AuthorizationError) as exc_info:
            await resolver.require(make_principal(CLIENT_ID, Role.CLIENT), OTHER_CLIENT_ID)
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Access denied."

    @pytest.mark.asyncio
    async def test_require_returns_quietly_when_allowed(self, resolver):
        assert await resolver.require(make_principal(THERAPIST_ID, Role.THERAPIST), CLIENT_ID) is None
