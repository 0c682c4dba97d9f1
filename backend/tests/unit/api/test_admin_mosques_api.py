"""
Unit Tests for admin mosque review endpoints
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from mosqueconnect.models import ActivityLog, Mosque, MosqueStatus

from conftest import make_mosque


class TestMosqueReviewAccess:

    @pytest.mark.asyncio
    async def test_without_token_is_401(self, client: AsyncClient, db_session, pending_mosque):
        response = await client.patch(f'/api/admin/mosques/{pending_mosque.id}', json={'status': 'approved'})

        assert response.status_code == 401
        await db_session.refresh(pending_mosque)
        assert pending_mosque.status == MosqueStatus.PENDING

    @pytest.mark.asyncio
    @pytest.mark.parametrize('headers_fixture', ['auth_headers', 'imam_auth_headers', 'business_auth_headers'])
    async def test_non_admin_is_403(self, request, client: AsyncClient, db_session, pending_mosque, test_user, business_user,
                                    headers_fixture):
        headers = request.getfixturevalue(headers_fixture)

        response = await client.patch(f'/api/admin/mosques/{pending_mosque.id}', headers=headers,
                                      json={'status': 'approved'})

        assert response.status_code == 403
        assert response.json()['success'] is False
        await db_session.refresh(pending_mosque)
        assert pending_mosque.status == MosqueStatus.PENDING
        assert pending_mosque.verified_by is None


class TestMosqueReview:

    @pytest.mark.asyncio
    async def test_admin_approves(self, client: AsyncClient, db_session, pending_mosque, admin_user,
                                  admin_auth_headers):
        response = await client.patch(f'/api/admin/mosques/{pending_mosque.id}', headers=admin_auth_headers,
                                      json={'status': 'approved', 'notes': 'Documents verified'})

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'approved'
        assert data['verified'] is True
        assert data['verified_by'] == admin_user.id
        assert data['verified_at'] is not None

        logs = (await db_session.execute(
            select(ActivityLog).where(ActivityLog.target_id == pending_mosque.id)
        )).scalars().all()
        assert [log.action for log in logs] == ['APPROVE_MOSQUE']
        assert logs[0].module == 'mosques'

    @pytest.mark.asyncio
    async def test_unknown_status_is_400(self, client: AsyncClient, pending_mosque, admin_auth_headers):
        response = await client.patch(f'/api/admin/mosques/{pending_mosque.id}', headers=admin_auth_headers,
                                      json={'status': 'archived'})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_second_review_is_409(self, client: AsyncClient, pending_mosque, admin_auth_headers):
        url = f'/api/admin/mosques/{pending_mosque.id}'
        await client.patch(url, headers=admin_auth_headers, json={'status': 'rejected'})

        response = await client.patch(url, headers=admin_auth_headers, json={'status': 'approved'})

        assert response.status_code == 409
        error = response.json()['error']
        assert error['code'] == 'INVALID_STATUS_TRANSITION'
        assert error['details']['current_status'] == 'rejected'

    @pytest.mark.asyncio
    async def test_missing_mosque_is_404(self, client: AsyncClient, admin_auth_headers):
        response = await client.patch('/api/admin/mosques/6f1d2c3b-4a5e-4f60-8b7a-9c0d1e2f3a4b',
                                      headers=admin_auth_headers, json={'status': 'approved'})

        assert response.status_code == 404


class TestMosqueAdminListing:

    @pytest.mark.asyncio
    async def test_filter_by_status(self, client: AsyncClient, db_session, imam_user, admin_auth_headers):
        await make_mosque(db_session, imam_user, status=MosqueStatus.APPROVED)
        await make_mosque(db_session, imam_user)
        await make_mosque(db_session, imam_user)

        response = await client.get('/api/admin/mosques?status=pending', headers=admin_auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['pagination']['totalItems'] == 2
        assert {m['status'] for m in data['mosques']} == {'pending'}

    @pytest.mark.asyncio
    async def test_delete_logs_action(self, client: AsyncClient, db_session, pending_mosque, admin_auth_headers):
        mosque_id = pending_mosque.id

        response = await client.delete(f'/api/admin/mosques/{mosque_id}', headers=admin_auth_headers)

        assert response.status_code == 200
        db_session.expunge_all()
        assert await db_session.get(Mosque, mosque_id) is None
        log = (await db_session.execute(select(ActivityLog))).scalars().one()
        assert log.action == 'DELETE_MOSQUE'
        assert log.target_id == mosque_id


class TestPublicMosqueDirectory:

    @pytest.mark.asyncio
    async def test_anonymous_sees_only_approved(self, client: AsyncClient, db_session, imam_user):
        approved = await make_mosque(db_session, imam_user, status=MosqueStatus.APPROVED)
        await make_mosque(db_session, imam_user)

        response = await client.get('/api/mosques?status=pending')

        assert response.status_code == 200
        assert [m['id'] for m in response.json()['mosques']] == [approved.id]

    @pytest.mark.asyncio
    async def test_pending_mosque_hidden_from_public(self, client: AsyncClient, pending_mosque, auth_headers):
        response = await client.get(f'/api/mosques/{pending_mosque.id}', headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_imam_sees_own_pending_mosque(self, client: AsyncClient, pending_mosque, imam_auth_headers):
        response = await client.get(f'/api/mosques/{pending_mosque.id}', headers=imam_auth_headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_imam_submission_starts_pending(self, client: AsyncClient, imam_user, imam_auth_headers):
        response = await client.post('/api/mosques', headers=imam_auth_headers, json={
            'name': 'Masjid Al-Rahma',
            'street': '400 Lake St',
            'city': 'Chicago',
            'services': ['Friday Prayers', 'Food Bank'],
            'prayer_times': {'fajr': '05:15', 'jumma': '13:30'},
        })

        assert response.status_code == 201
        data = response.json()
        assert data['status'] == 'pending'
        assert data['imam_id'] == imam_user.id
        assert data['services'] == ['Friday Prayers', 'Food Bank']

    @pytest.mark.asyncio
    async def test_plain_user_cannot_submit(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/mosques', headers=auth_headers,
                                     json={'name': 'Masjid', 'street': '1 Main St'})
        assert response.status_code == 403
