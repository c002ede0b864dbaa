"""
ResilienceHub Backend — Goal, Action & Journal Endpoint Tests
=============================================================

What we test:
    ✅ Therapists give feedback on their clients' goals, never their own
    ✅ Only the therapist (or an admin) approves goals and adds comments
    ✅ Milestone and action completion follow the same feedback rule
    ✅ Private journal entries are visible to the author and admins only
    ✅ Comments by therapists are attributed to them
"""

import pytest

from resilience_hub.routes.actions import OWN_ACTION_UPDATE
from resilience_hub.routes.goals import OWN_GOAL_MILESTONE_CREATE, OWN_GOAL_STATUS
from resilience_hub.routes.journal import PRIVATE_ENTRY

GOAL = {
    "title": "Sleep better",
    "specific": "In bed by 23:00",
    "measurable": "Sleep diary",
    "achievable": "Alarm reminder",
    "relevant": "Energy",
    "timebound": "3 weeks",
}

ACTION = {"type": "behavioral_activation", "title": "Call a friend", "moodBefore": 3}


async def create_goal(client, user_id, headers):
    response = await client.post(f"/api/users/{user_id}/goals", json=GOAL, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def create_entry(client, user_id, headers, **overrides):
    body = {"title": "Monday", "content": "Long day", **overrides}
    response = await client.post(f"/api/users/{user_id}/journal", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestGoalFeedback:

    @pytest.mark.asyncio
    async def test_therapist_approves_client_goal(self, client, seed):
        therapist = await seed.therapist()
        patient = await seed.client(therapist=therapist)
        goal = await create_goal(client, patient.id, await seed.login(patient))

        response = await client.patch(
            f"/api/goals/{goal['id']}/status",
            json={"status": "approved", "therapistComments": "Great plan"},
            headers=await seed.login(therapist),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["therapistComments"] == "Great plan"

    @pytest.mark.asyncio
    async def test_client_may_progress_but_not_approve(self, client, seed):
        patient = await seed.client()
        headers = await seed.login(patient)
        goal = await create_goal(client, patient.id, headers)

        progressed = await client.patch(
            f"/api/goals/{goal['id']}/status", json={"status": "in_progress"}, headers=headers
        )
        approved = await client.patch(
            f"/api/goals/{goal['id']}/status", json={"status": "approved"}, headers=headers
        )
        commented = await client.patch(
            f"/api/goals/{goal['id']}/status",
            json={"status": "completed", "therapistComments": "Self praise"},
            headers=headers,
        )

        assert progressed.status_code == 200
        assert approved.status_code == 403
        assert commented.status_code == 403
        assert "Only the client's therapist" in approved.json()["message"]

    @pytest.mark.asyncio
    async def test_therapist_cannot_update_own_goal(self, client, seed):
        admin = await seed.admin()
        therapist = await seed.therapist()
        goal = await create_goal(client, therapist.id, await seed.login(admin))
        headers = await seed.login(therapist)

        status_update = await client.patch(
            f"/api/goals/{goal['id']}/status", json={"status": "completed"}, headers=headers
        )
        milestone = await client.post(
            f"/api/goals/{goal['id']}/milestones", json={"title": "Week 1"}, headers=headers
        )

        assert status_update.status_code == 403
        assert status_update.json() == {"message": OWN_GOAL_STATUS}
        assert milestone.status_code == 403
        assert milestone.json() == {"message": OWN_GOAL_MILESTONE_CREATE}

    @pytest.mark.asyncio
    async def test_other_therapist_is_not_your_client(self, client, seed):
        patient = await seed.client(therapist=await seed.therapist())
        stranger = await seed.therapist()
        goal = await create_goal(client, patient.id, await seed.login(patient))

        response = await client.patch(
            f"/api/goals/{goal['id']}/status",
            json={"status": "approved"},
            headers=await seed.login(stranger),
        )

        assert response.status_code == 403
        assert response.json() == {"message": "Access denied. Not your client."}

    @pytest.mark.asyncio
    async def test_missing_goal_is_404(self, client, seed):
        response = await client.patch(
            "/api/goals/4242/status",
            json={"status": "completed"},
            headers=await seed.login(await seed.client()),
        )

        assert response.status_code == 404


class TestMilestones:

    @pytest.mark.asyncio
    async def test_create_list_and_complete(self, client, seed):
        therapist = await seed.therapist()
        patient = await seed.client(therapist=therapist)
        patient_headers = await seed.login(patient)
        goal = await create_goal(client, patient.id, patient_headers)

        created = await client.post(
            f"/api/goals/{goal['id']}/milestones",
            json={"title": "First week"},
            headers=await seed.login(therapist),
        )
        completed = await client.patch(
            f"/api/milestones/{created.json()['id']}/completion",
            json={"isCompleted": True},
            headers=patient_headers,
        )
        listed = await client.get(f"/api/goals/{goal['id']}/milestones", headers=patient_headers)

        assert created.status_code == 201
        assert completed.json()["isCompleted"] is True
        assert [m["title"] for m in listed.json()] == ["First week"]

    @pytest.mark.asyncio
    async def test_stranger_cannot_read_milestones(self, client, seed):
        patient = await seed.client()
        goal = await create_goal(client, patient.id, await seed.login(patient))

        response = await client.get(
            f"/api/goals/{goal['id']}/milestones", headers=await seed.login(await seed.client())
        )

        assert response.status_code == 403


class TestActions:

    @pytest.mark.asyncio
    async def test_complete_action_sets_timestamp(self, client, seed):
        patient = await seed.client()
        headers = await seed.login(patient)
        created = await client.post(f"/api/users/{patient.id}/actions", json=ACTION, headers=headers)

        done = await client.patch(
            f"/api/actions/{created.json()['id']}/completion",
            json={"isCompleted": True, "moodAfter": 7, "reflection": "Felt lighter"},
            headers=headers,
        )
        undone = await client.patch(
            f"/api/actions/{created.json()['id']}/completion",
            json={"isCompleted": False},
            headers=headers,
        )

        assert created.status_code == 201
        assert done.json()["completedAt"] is not None
        assert done.json()["moodAfter"] == 7
        assert undone.json()["completedAt"] is None
        assert undone.json()["reflection"] == "Felt lighter"

    @pytest.mark.asyncio
    async def test_therapist_cannot_complete_own_action(self, client, seed):
        admin = await seed.admin()
        therapist = await seed.therapist()
        created = await client.post(
            f"/api/users/{therapist.id}/actions", json=ACTION, headers=await seed.login(admin)
        )

        response = await client.patch(
            f"/api/actions/{created.json()['id']}/completion",
            json={"isCompleted": True},
            headers=await seed.login(therapist),
        )

        assert response.status_code == 403
        assert response.json() == {"message": OWN_ACTION_UPDATE}

    @pytest.mark.asyncio
    async def test_unknown_action_type_rejected(self, client, seed):
        patient = await seed.client()

        response = await client.post(
            f"/api/users/{patient.id}/actions",
            json={**ACTION, "type": "meditation"},
            headers=await seed.login(patient),
        )

        assert response.status_code == 400


class TestJournal:

    @pytest.mark.asyncio
    async def test_private_entries_hidden_from_therapist(self, client, seed):
        therapist = await seed.therapist()
        patient = await seed.client(therapist=therapist)
        admin = await seed.admin()
        headers = await seed.login(patient)
        await create_entry(client, patient.id, headers, title="Shared")
        await create_entry(client, patient.id, headers, title="Secret", isPrivate=True)

        own = await client.get(f"/api/users/{patient.id}/journal", headers=headers)
        therapist_view = await client.get(
            f"/api/users/{patient.id}/journal", headers=await seed.login(therapist)
        )
        admin_view = await client.get(
            f"/api/users/{patient.id}/journal", headers=await seed.login(admin)
        )

        assert sorted(e["title"] for e in own.json()) == ["Secret", "Shared"]
        assert [e["title"] for e in therapist_view.json()] == ["Shared"]
        assert len(admin_view.json()) == 2

    @pytest.mark.asyncio
    async def test_comments_on_private_entry_denied(self, client, seed):
        therapist = await seed.therapist()
        patient = await seed.client(therapist=therapist)
        entry = await create_entry(
            client, patient.id, await seed.login(patient), isPrivate=True
        )

        response = await client.get(
            f"/api/journal/{entry['id']}/comments", headers=await seed.login(therapist)
        )

        assert response.status_code == 403
        assert response.json() == {"message": PRIVATE_ENTRY}

    @pytest.mark.asyncio
    async def test_therapist_comment_is_attributed(self, client, seed):
        therapist = await seed.therapist()
        patient = await seed.client(therapist=therapist)
        patient_headers = await seed.login(patient)
        entry = await create_entry(client, patient.id, patient_headers)

        by_therapist = await client.post(
            f"/api/journal/{entry['id']}/comments",
            json={"comment": "Thanks for sharing"},
            headers=await seed.login(therapist),
        )
        by_author = await client.post(
            f"/api/journal/{entry['id']}/comments",
            json={"comment": "Reply"},
            headers=patient_headers,
        )
        listed = await client.get(f"/api/journal/{entry['id']}/comments", headers=patient_headers)

        assert by_therapist.status_code == 201
        assert by_therapist.json()["therapistId"] == therapist.id
        assert by_author.json()["therapistId"] is None
        assert [c["comment"] for c in listed.json()] == ["Thanks for sharing", "Reply"]

    @pytest.mark.asyncio
    async def test_only_author_or_admin_deletes(self, client, seed):
        therapist = await seed.therapist()
        patient = await seed.client(therapist=therapist)
        patient_headers = await seed.login(patient)
        entry = await create_entry(client, patient.id, patient_headers)
        path = f"/api/users/{patient.id}/journal/{entry['id']}"

        denied = await client.delete(path, headers=await seed.login(therapist))
        deleted = await client.delete(path, headers=patient_headers)
        gone = await client.get(f"/api/journal/{entry['id']}/comments", headers=patient_headers)

        assert denied.status_code == 403
        assert deleted.status_code == 200
        assert gone.status_code == 404
