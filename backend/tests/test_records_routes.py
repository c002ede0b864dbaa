"""
ResilienceHub Backend — Emotion, Thought & Library Endpoint Tests
=================================================================

What we test:
    ✅ Emotion create/list/stats and cascading delete
    ✅ Single-record reads: 404 before the access decision
    ✅ Thought records linked to the owner's emotion records only
    ✅ Daily reflection averages
    ✅ Protective factors: creation permission, global entries, usage
"""

import pytest
from sqlalchemy import func, select

from resilience_hub.models import ProtectiveFactorUsage, ThoughtRecord

EMOTION = {
    "coreEmotion": "Fear",
    "primaryEmotion": "Anxious",
    "tertiaryEmotion": "Worried",
    "intensity": 7,
    "situation": "Before a presentation",
}


async def create_emotion(client, user_id, headers, **overrides):
    response = await client.post(
        f"/api/users/{user_id}/emotions", json={**EMOTION, **overrides}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


async def create_thought(client, user_id, headers, **overrides):
    body = {"automaticThoughts": "Everyone will laugh", "cognitiveDistortions": ["mind reading"]}
    body.update(overrides)
    response = await client.post(f"/api/users/{user_id}/thoughts", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestEmotions:

    @pytest.mark.asyncio
    async def test_create_and_list(self, client, seed):
        me = await seed.client()
        headers = await seed.login(me)

        created = await create_emotion(client, me.id, headers, location="Office")
        listed = await client.get(f"/api/users/{me.id}/emotions", headers=headers)

        assert created["userId"] == me.id
        assert created["location"] == "Office"
        assert [r["id"] for r in listed.json()] == [created["id"]]

    @pytest.mark.asyncio
    async def test_intensity_out_of_range(self, client, seed):
        me = await seed.client()

        response = await client.post(
            f"/api/users/{me.id}/emotions",
            json={**EMOTION, "intensity": 11},
            headers=await seed.login(me),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid data"

    @pytest.mark.asyncio
    async def test_stats_counts_with_colours(self, client, seed):
        me = await seed.client()
        headers = await seed.login(me)
        for core in ("Fear", "Fear", "Joy"):
            await create_emotion(client, me.id, headers, coreEmotion=core)
        await create_emotion(client, me.id, headers, coreEmotion="Awe")

        response = await client.get(f"/api/users/{me.id}/emotions/stats", headers=headers)

        assert response.json() == [
            {"emotion": "Fear", "count": 2, "color": "#8A65AA"},
            {"emotion": "Awe", "count": 1, "color": "#888888"},
            {"emotion": "Joy", "count": 1, "color": "#F9D71C"},
        ]

    @pytest.mark.asyncio
    async def test_delete_cascades_to_thoughts(self, client, seed, db_session):
        me = await seed.client()
        headers = await seed.login(me)
        emotion = await create_emotion(client, me.id, headers)
        await create_thought(client, me.id, headers, emotionRecordId=emotion["id"])

        response = await client.delete(
            f"/api/users/{me.id}/emotions/{emotion['id']}", headers=headers
        )

        assert response.status_code == 200
        count = await db_session.scalar(select(func.count()).select_from(ThoughtRecord))
        assert count == 0

    @pytest.mark.asyncio
    async def test_delete_record_of_another_user_under_own_prefix(self, client, seed):
        me = await seed.client()
        other = await seed.client()
        theirs = await create_emotion(client, other.id, await seed.login(other))

        response = await client.delete(
            f"/api/users/{me.id}/emotions/{theirs['id']}", headers=await seed.login(me)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_single_record_read(self, client, seed):
        therapist = await seed.therapist()
        mine = await seed.client(therapist=therapist)
        stranger = await seed.client()
        record = await create_emotion(client, mine.id, await seed.login(mine))

        ok = await client.get(f"/api/emotions/{record['id']}", headers=await seed.login(therapist))
        denied = await client.get(f"/api/emotions/{record['id']}", headers=await seed.login(stranger))
        missing = await client.get("/api/emotions/9999", headers=await seed.login(stranger))

        assert ok.status_code == 200
        assert denied.status_code == 403
        assert denied.json() == {"message": "Access denied."}
        assert missing.status_code == 404


class TestThoughts:

    @pytest.mark.asyncio
    async def test_filter_by_emotion_record(self, client, seed):
        me = await seed.client()
        headers = await seed.login(me)
        emotion = await create_emotion(client, me.id, headers)
        linked = await create_thought(client, me.id, headers, emotionRecordId=emotion["id"])
        await create_thought(client, me.id, headers)

        response = await client.get(
            f"/api/users/{me.id}/thoughts",
            params={"emotionRecordId": emotion["id"]},
            headers=headers,
        )

        assert [t["id"] for t in response.json()] == [linked["id"]]

    @pytest.mark.asyncio
    async def test_cannot_link_someone_elses_emotion(self, client, seed):
        me = await seed.client()
        other = await seed.client()
        theirs = await create_emotion(client, other.id, await seed.login(other))

        response = await client.post(
            f"/api/users/{me.id}/thoughts",
            json={"automaticThoughts": "x", "emotionRecordId": theirs["id"]},
            headers=await seed.login(me),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_ratings_daily_average(self, client, seed):
        me = await seed.client()
        headers = await seed.login(me)
        for rating in (6, 7, 7):
            await create_thought(client, me.id, headers, reflectionRating=rating)
        await create_thought(client, me.id, headers)

        response = await client.get(f"/api/users/{me.id}/thoughts/ratings", headers=headers)

        points = response.json()
        assert len(points) == 1
        assert points[0]["rating"] == 6.7

    @pytest.mark.asyncio
    async def test_therapist_cannot_create_thought_for_client(self, client, seed):
        therapist = await seed.therapist()
        mine = await seed.client(therapist=therapist)

        response = await client.post(
            f"/api/users/{mine.id}/thoughts",
            json={"automaticThoughts": "x"},
            headers=await seed.login(therapist),
        )

        assert response.status_code == 403


class TestProtectiveFactors:

    @pytest.mark.asyncio
    async def test_therapist_creates_for_own_client(self, client, seed):
        therapist = await seed.therapist()
        mine = await seed.client(therapist=therapist)
        stranger = await seed.client()
        headers = await seed.login(therapist)

        ok = await client.post(
            f"/api/users/{mine.id}/protective-factors", json={"name": "Family"}, headers=headers
        )
        denied = await client.post(
            f"/api/users/{stranger.id}/protective-factors", json={"name": "Family"}, headers=headers
        )

        assert ok.status_code == 201
        assert ok.json()["userId"] == mine.id
        assert denied.status_code == 403
        assert denied.json() == {
            "message": "Access denied. You can only create resources for your own clients."
        }

    @pytest.mark.asyncio
    async def test_client_cannot_create_for_others(self, client, seed):
        me = await seed.client()
        other = await seed.client()

        response = await client.post(
            f"/api/users/{other.id}/protective-factors",
            json={"name": "Sport"},
            headers=await seed.login(me),
        )

        assert response.status_code == 403
        assert response.json() == {
            "message": "Access denied. You can only create resources for yourself."
        }

    @pytest.mark.asyncio
    async def test_global_entries_admin_only(self, client, seed):
        admin = await seed.admin()
        me = await seed.client()
        me_headers = await seed.login(me)

        denied = await client.post(
            f"/api/users/{me.id}/protective-factors",
            json={"name": "Faith", "isGlobal": True},
            headers=me_headers,
        )
        created = await client.post(
            f"/api/users/{admin.id}/protective-factors",
            json={"name": "Faith", "isGlobal": True},
            headers=await seed.login(admin),
        )
        await client.post(
            f"/api/users/{me.id}/protective-factors", json={"name": "Music"}, headers=me_headers
        )
        own_only = await client.get(f"/api/users/{me.id}/protective-factors", headers=me_headers)
        with_global = await client.get(
            f"/api/users/{me.id}/protective-factors",
            params={"includeGlobal": "true"},
            headers=me_headers,
        )
        delete_global = await client.delete(
            f"/api/users/{me.id}/protective-factors/{created.json()['id']}", headers=me_headers
        )

        assert denied.status_code == 403
        assert created.status_code == 201
        assert created.json()["userId"] is None
        assert [f["name"] for f in own_only.json()] == ["Music"]
        assert [f["name"] for f in with_global.json()] == ["Faith", "Music"]
        assert delete_global.status_code == 403

    @pytest.mark.asyncio
    async def test_usage_recorded_against_own_thought(self, client, seed, db_session):
        me = await seed.client()
        other = await seed.client()
        headers = await seed.login(me)
        factor = (
            await client.post(
                f"/api/users/{me.id}/protective-factors", json={"name": "Friends"}, headers=headers
            )
        ).json()
        thought = await create_thought(client, me.id, headers)
        foreign_thought = await create_thought(client, other.id, await seed.login(other))

        ok = await client.post(
            f"/api/users/{me.id}/protective-factors-usage",
            json={"thoughtRecordId": thought["id"], "protectiveFactorId": factor["id"]},
            headers=headers,
        )
        foreign = await client.post(
            f"/api/users/{me.id}/protective-factors-usage",
            json={"thoughtRecordId": foreign_thought["id"], "protectiveFactorId": factor["id"]},
            headers=headers,
        )
        listed = await client.get(
            f"/api/users/{me.id}/thoughts/{thought['id']}/protective-factors", headers=headers
        )
        hidden = await client.get(
            f"/api/users/{me.id}/thoughts/{foreign_thought['id']}/protective-factors",
            headers=headers,
        )

        assert ok.status_code == 201
        assert foreign.status_code == 404
        assert [u["protectiveFactorId"] for u in listed.json()] == [factor["id"]]
        assert hidden.status_code == 404

        deleted = await client.delete(
            f"/api/users/{me.id}/protective-factors/{factor['id']}", headers=headers
        )
        assert deleted.status_code == 200
        usage_count = await db_session.scalar(
            select(func.count()).select_from(ProtectiveFactorUsage)
        )
        assert usage_count == 0

    @pytest.mark.asyncio
    async def test_coping_strategies_share_the_rules(self, client, seed):
        therapist = await seed.therapist()
        stranger = await seed.client()

        response = await client.post(
            f"/api/users/{stranger.id}/coping-strategies",
            json={"name": "Breathing"},
            headers=await seed.login(therapist),
        )

        assert response.status_code == 403
