"""
Unit Tests for the signed-in user's volunteering endpoints
"""
import pytest
from httpx import AsyncClient

from mosqueconnect.models import MosqueStatus, UserRole, VolunteerStatus

from conftest import make_mosque, make_user, headers_for


@pytest.fixture
async def mosque(db_session, imam_user):
    return await make_mosque(db_session, imam_user, status=MosqueStatus.APPROVED, name='Masjid Al-Falah')


REGISTRATION = {
    'name': 'Yusuf Karim',
    'email': 'yusuf@example.com',
    'skills': ['driving'],
    'availability': 'Weekday evenings',
}

OFFER = {
    'title': 'Airport pickups',
    'description': 'Can drive new families from the airport',
    'category': 'outreach',
    'availability': 'Weekends',
    'time_commitment': 'On call',
    'experience': 'Five years of rideshare driving',
}


async def register_and_review(client: AsyncClient, user_headers, admin_headers, decision: str) -> None:
    registered = await client.post('/api/volunteer/register', headers=user_headers, json=REGISTRATION)
    reviewed = await client.patch(f"/api/admin/volunteers/{registered.json()['id']}", headers=admin_headers,
                                  json={'status': decision})
    assert reviewed.status_code == 200


class TestVolunteerProfile:

    @pytest.mark.asyncio
    async def test_profile_created_on_first_read(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/user/volunteer/profile', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['profile'] == {
            'skills': [], 'availability': {}, 'contact_preferences': {},
            'certificates': [], 'bio': '', 'experience': '',
        }

    @pytest.mark.asyncio
    async def test_update_profile(self, client: AsyncClient, auth_headers):
        response = await client.put('/api/user/volunteer/profile', headers=auth_headers, json={
            'skills': ['arabic', 'first aid'],
            'availability': {'saturday': True},
            'bio': 'Retired teacher',
        })

        assert response.status_code == 200
        assert response.json()['message'] == 'Volunteer profile updated successfully'

        fetched = await client.get('/api/user/volunteer/profile', headers=auth_headers)
        assert fetched.json()['profile']['skills'] == ['arabic', 'first aid']
        assert fetched.json()['profile']['bio'] == 'Retired teacher'


class TestVolunteerStatusToggle:

    @pytest.mark.asyncio
    async def test_unregistered_user_cannot_activate(self, client: AsyncClient, db_session, test_user,
                                                     auth_headers):
        response = await client.patch('/api/user/volunteer/status', headers=auth_headers, json={'status': 'active'})

        assert response.status_code == 409
        assert response.json()['error']['code'] == 'VOLUNTEER_NOT_APPROVED'
        await db_session.refresh(test_user)
        assert test_user.volunteer_status == VolunteerStatus.NOT_VOLUNTEER

    @pytest.mark.asyncio
    async def test_pending_registration_cannot_activate(self, client: AsyncClient, db_session, test_user,
                                                        auth_headers):
        await client.post('/api/volunteer/register', headers=auth_headers, json=REGISTRATION)

        response = await client.patch('/api/user/volunteer/status', headers=auth_headers, json={'status': 'active'})

        assert response.status_code == 409
        await db_session.refresh(test_user)
        assert test_user.volunteer_status == VolunteerStatus.PENDING
        assert test_user.volunteer_active_since is None

    @pytest.mark.asyncio
    async def test_rejected_registration_cannot_activate(self, client: AsyncClient, auth_headers,
                                                         admin_auth_headers):
        await register_and_review(client, auth_headers, admin_auth_headers, 'rejected')

        response = await client.patch('/api/user/volunteer/status', headers=auth_headers, json={'status': 'active'})

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_approved_volunteer_toggles(self, client: AsyncClient, auth_headers, admin_auth_headers):
        await register_and_review(client, auth_headers, admin_auth_headers, 'approved')

        paused = await client.patch('/api/user/volunteer/status', headers=auth_headers, json={'status': 'inactive'})
        assert paused.status_code == 200
        assert paused.json()['status'] == 'inactive'

        resumed = await client.patch('/api/user/volunteer/status', headers=auth_headers, json={'status': 'active'})
        assert resumed.status_code == 200
        assert resumed.json()['status'] == 'active'
        assert resumed.json()['active_since'] is not None

    @pytest.mark.asyncio
    async def test_accepted_application_counts_as_approval(self, client: AsyncClient, auth_headers,
                                                           imam_auth_headers, mosque):
        created = await client.post('/api/volunteers/applications', headers=auth_headers, json={
            'mosque_id': mosque.id,
            'title': 'Cleaning crew',
            'description': 'Friday cleanup',
            'category': 'cleaning',
            'availability': 'Fridays',
            'time_commitment': '2 hours',
        })
        await client.patch(f"/api/volunteers/applications/{created.json()['id']}", headers=imam_auth_headers,
                           json={'status': 'accepted'})

        response = await client.patch('/api/user/volunteer/status', headers=auth_headers,
                                      json={'status': 'inactive'})

        assert response.status_code == 200
        assert response.json()['accepted_applications'] == 1
        assert response.json()['total_hours'] == 10

    @pytest.mark.asyncio
    async def test_only_active_or_inactive_allowed(self, client: AsyncClient, auth_headers):
        response = await client.patch('/api/user/volunteer/status', headers=auth_headers, json={'status': 'pending'})

        assert response.status_code == 400
        assert response.json()['error']['details'] == {'field': 'status'}

    @pytest.mark.asyncio
    async def test_status_summary(self, client: AsyncClient, auth_headers):
        await client.post('/api/user/volunteer/offers', headers=auth_headers, json=OFFER)

        response = await client.get('/api/user/volunteer/status', headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            'status': 'not_volunteer',
            'active_since': None,
            'total_applications': 0,
            'accepted_applications': 0,
            'total_hours': 0,
            'active_offers': 1,
        }


class TestMyApplications:

    @pytest.mark.asyncio
    async def test_lists_only_own_applications(self, client: AsyncClient, db_session, auth_headers, mosque):
        payload = {
            'mosque_id': mosque.id,
            'title': 'Youth mentor',
            'description': 'Mentoring teens after school',
            'category': 'education',
            'availability': 'Weekdays',
            'time_commitment': '3 hours',
        }
        await client.post('/api/volunteers/applications', headers=auth_headers, json=payload)
        other = await make_user(db_session, UserRole.USER)
        await client.post('/api/volunteers/applications', headers=headers_for(other), json=payload)

        response = await client.get('/api/user/volunteer/applications?status=pending', headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()['applications']) == 1
        assert response.json()['pagination']['totalItems'] == 1


class TestMyOffers:

    @pytest.mark.asyncio
    async def test_crud(self, client: AsyncClient, auth_headers):
        created = await client.post('/api/user/volunteer/offers', headers=auth_headers, json=OFFER)
        assert created.status_code == 201
        url = f"/api/user/volunteer/offers/{created.json()['id']}"

        listing = await client.get('/api/user/volunteer/offers', headers=auth_headers)
        assert [o['id'] for o in listing.json()['offers']] == [created.json()['id']]

        updated = await client.put(url, headers=auth_headers, json={'title': 'Airport and hospital rides',
                                                                    'experience': None})
        assert updated.status_code == 200
        assert updated.json()['title'] == 'Airport and hospital rides'
        assert updated.json()['experience'] is None

        fetched = await client.get(url, headers=auth_headers)
        assert fetched.json()['title'] == 'Airport and hospital rides'

        deleted = await client.delete(url, headers=auth_headers)
        assert deleted.status_code == 200
        missing = await client.get(url, headers=auth_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_null_title_rejected(self, client: AsyncClient, auth_headers):
        created = await client.post('/api/user/volunteer/offers', headers=auth_headers, json=OFFER)

        response = await client.put(f"/api/user/volunteer/offers/{created.json()['id']}", headers=auth_headers,
                                    json={'title': None})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_other_users_offer_is_hidden(self, client: AsyncClient, db_session, auth_headers):
        created = await client.post('/api/user/volunteer/offers', headers=auth_headers, json=OFFER)
        other = await make_user(db_session, UserRole.USER)

        response = await client.delete(f"/api/user/volunteer/offers/{created.json()['id']}",
                                       headers=headers_for(other))

        assert response.status_code == 404


class TestVolunteerActivity:

    @pytest.mark.asyncio
    async def test_timeline_is_newest_first(self, client: AsyncClient, auth_headers, imam_auth_headers, mosque):
        created = await client.post('/api/volunteers/applications', headers=auth_headers, json={
            'mosque_id': mosque.id,
            'title': 'Library helper',
            'description': 'Shelving books',
            'category': 'administration',
            'availability': 'Sundays',
            'time_commitment': '2 hours',
        })
        await client.post('/api/user/volunteer/offers', headers=auth_headers, json=OFFER)
        await client.patch(f"/api/volunteers/applications/{created.json()['id']}", headers=imam_auth_headers,
                           json={'status': 'rejected'})

        response = await client.get('/api/user/volunteer/activity', headers=auth_headers)

        assert response.status_code == 200
        activity = response.json()['activity']
        assert [entry['type'] for entry in activity] == [
            'application_rejected', 'offer_created', 'application_submitted',
        ]
        assert activity[0]['metadata']['mosque_name'] == 'Masjid Al-Falah'
