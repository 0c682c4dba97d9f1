"""
Unit Tests for volunteer applications, needs and offers
"""
import pytest
from httpx import AsyncClient

from mosqueconnect.models import MosqueStatus, UserRole, VolunteerStatus

from conftest import make_mosque, make_user, headers_for


@pytest.fixture
async def mosque(db_session, imam_user):
    return await make_mosque(db_session, imam_user, status=MosqueStatus.APPROVED, name='Masjid Al-Noor')


def application_payload(mosque_id, **overrides):
    payload = {
        'mosque_id': mosque_id,
        'title': 'Weekend Quran teacher',
        'description': 'I can teach tajweed to children',
        'category': 'education',
        'availability': 'Saturdays',
        'time_commitment': '4 hours a week',
    }
    payload.update(overrides)
    return payload


def need_payload(mosque_id, **overrides):
    payload = {
        'mosque_id': mosque_id,
        'title': 'Iftar setup crew',
        'description': 'Help set up tables before maghrib',
        'category': 'events',
        'time_commitment': '2 hours daily during Ramadan',
        'volunteers_needed': 2,
    }
    payload.update(overrides)
    return payload


def offer_payload(**overrides):
    payload = {
        'title': 'Website help',
        'description': 'I can maintain a mosque website',
        'category': 'technical',
        'availability': 'Evenings',
        'time_commitment': '3 hours a week',
    }
    payload.update(overrides)
    return payload


class TestVolunteerApplications:

    @pytest.mark.asyncio
    async def test_create_defaults_contact_email(self, client: AsyncClient, test_user, auth_headers, mosque):
        response = await client.post('/api/volunteers/applications', headers=auth_headers,
                                     json=application_payload(mosque.id))

        assert response.status_code == 201
        data = response.json()
        assert data['status'] == 'pending'
        assert data['user_id'] == test_user.id
        assert data['contact_email'] == test_user.email

        fetched = await client.get(f"/api/volunteers/applications/{data['id']}", headers=auth_headers)
        assert fetched.json()['title'] == 'Weekend Quran teacher'

    @pytest.mark.asyncio
    async def test_second_open_application_rejected(self, client: AsyncClient, auth_headers, mosque):
        await client.post('/api/volunteers/applications', headers=auth_headers, json=application_payload(mosque.id))

        response = await client.post('/api/volunteers/applications', headers=auth_headers,
                                     json=application_payload(mosque.id, title='Another role'))

        assert response.status_code == 400
        assert response.json()['error']['details'] == {'field': 'mosque_id'}

    @pytest.mark.asyncio
    async def test_unapproved_mosque_rejected(self, client: AsyncClient, auth_headers, pending_mosque):
        response = await client.post('/api/volunteers/applications', headers=auth_headers,
                                     json=application_payload(pending_mosque.id))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_applicant_withdraws(self, client: AsyncClient, auth_headers, mosque):
        created = await client.post('/api/volunteers/applications', headers=auth_headers,
                                    json=application_payload(mosque.id))
        url = f"/api/volunteers/applications/{created.json()['id']}"

        response = await client.patch(url, headers=auth_headers, json={'status': 'withdrawn'})

        assert response.status_code == 200
        assert response.json()['status'] == 'withdrawn'

        again = await client.patch(url, headers=auth_headers, json={'status': 'withdrawn'})
        assert again.status_code == 409

    @pytest.mark.asyncio
    async def test_imam_accepts_and_user_becomes_active(self, client: AsyncClient, db_session, test_user,
                                                        auth_headers, mosque, imam_auth_headers):
        created = await client.post('/api/volunteers/applications', headers=auth_headers,
                                    json=application_payload(mosque.id))

        listing = await client.get('/api/volunteers/applications', headers=imam_auth_headers)
        assert [a['id'] for a in listing.json()['applications']] == [created.json()['id']]

        response = await client.patch(f"/api/volunteers/applications/{created.json()['id']}",
                                      headers=imam_auth_headers,
                                      json={'status': 'accepted', 'message': 'See you Saturday'})

        assert response.status_code == 200
        assert response.json()['status'] == 'accepted'
        assert response.json()['response_message'] == 'See you Saturday'
        await db_session.refresh(test_user)
        assert test_user.volunteer_status == VolunteerStatus.ACTIVE
        assert test_user.volunteer_active_since is not None

    @pytest.mark.asyncio
    async def test_applicant_cannot_review_own_application(self, client: AsyncClient, auth_headers, mosque):
        created = await client.post('/api/volunteers/applications', headers=auth_headers,
                                    json=application_payload(mosque.id))

        response = await client.patch(f"/api/volunteers/applications/{created.json()['id']}",
                                      headers=auth_headers, json={'status': 'accepted'})

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_stranger_cannot_read_application(self, client: AsyncClient, db_session, auth_headers, mosque):
        created = await client.post('/api/volunteers/applications', headers=auth_headers,
                                    json=application_payload(mosque.id))
        stranger = await make_user(db_session, UserRole.USER)

        response = await client.get(f"/api/volunteers/applications/{created.json()['id']}",
                                    headers=headers_for(stranger))

        assert response.status_code == 403


class TestVolunteerNeeds:

    async def post_need(self, client: AsyncClient, headers, mosque_id, **overrides) -> dict:
        response = await client.post('/api/volunteers/needs', headers=headers, json=need_payload(mosque_id, **overrides))
        assert response.status_code == 201
        return response.json()

    @pytest.mark.asyncio
    async def test_imam_posts_need_and_it_is_listed(self, client: AsyncClient, imam_user, imam_auth_headers,
                                                    mosque):
        need = await self.post_need(client, imam_auth_headers, mosque.id)

        assert need['status'] == 'active'
        assert need['posted_by'] == imam_user.id
        listing = await client.get(f'/api/volunteers/needs?mosque_id={mosque.id}')
        assert [n['id'] for n in listing.json()['needs']] == [need['id']]

    @pytest.mark.asyncio
    async def test_other_imam_cannot_post(self, client: AsyncClient, db_session, mosque):
        other_imam = await make_user(db_session, UserRole.IMAM)

        response = await client.post('/api/volunteers/needs', headers=headers_for(other_imam),
                                     json=need_payload(mosque.id))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_duplicate_apply_rejected(self, client: AsyncClient, auth_headers, imam_auth_headers, mosque):
        need = await self.post_need(client, imam_auth_headers, mosque.id)
        url = f"/api/volunteers/needs/{need['id']}/apply"

        first = await client.post(url, headers=auth_headers, json={'message': 'Happy to help'})
        assert first.status_code == 201
        assert len(first.json()['applicants']) == 1

        second = await client.post(url, headers=auth_headers, json={})
        assert second.status_code == 400

    @pytest.mark.asyncio
    async def test_accepting_applicants_fills_need(self, client: AsyncClient, db_session, imam_auth_headers,
                                                   mosque):
        need = await self.post_need(client, imam_auth_headers, mosque.id, volunteers_needed=2)
        apply_url = f"/api/volunteers/needs/{need['id']}/apply"
        for _ in range(2):
            volunteer = await make_user(db_session, UserRole.USER)
            await client.post(apply_url, headers=headers_for(volunteer), json={})

        applicants = (await client.get(f"/api/volunteers/needs/{need['id']}")).json()['applicants']
        first = await client.patch(f"/api/volunteers/needs/{need['id']}/applicants/{applicants[0]['id']}",
                                   headers=imam_auth_headers, json={'status': 'accepted'})
        assert first.json()['status'] == 'active'
        assert first.json()['accepted_count'] == 1

        second = await client.patch(f"/api/volunteers/needs/{need['id']}/applicants/{applicants[1]['id']}",
                                    headers=imam_auth_headers, json={'status': 'accepted'})
        assert second.json()['status'] == 'filled'
        assert second.json()['accepted_count'] == 2

        late = await make_user(db_session, UserRole.USER)
        closed = await client.post(apply_url, headers=headers_for(late), json={})
        assert closed.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_applicant_is_404(self, client: AsyncClient, imam_auth_headers, mosque):
        need = await self.post_need(client, imam_auth_headers, mosque.id)

        response = await client.patch(
            f"/api/volunteers/needs/{need['id']}/applicants/1b2c3d4e-5f60-4a7b-8c9d-0e1f2a3b4c5d",
            headers=imam_auth_headers, json={'status': 'accepted'},
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_null_volunteers_needed_rejected(self, client: AsyncClient, imam_auth_headers, mosque):
        need = await self.post_need(client, imam_auth_headers, mosque.id)

        response = await client.put(f"/api/volunteers/needs/{need['id']}", headers=imam_auth_headers,
                                    json={'volunteers_needed': None})

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'

    @pytest.mark.asyncio
    async def test_update_clears_contact_phone(self, client: AsyncClient, imam_auth_headers, mosque):
        need = await self.post_need(client, imam_auth_headers, mosque.id, contact_phone='555-0100')

        response = await client.put(f"/api/volunteers/needs/{need['id']}", headers=imam_auth_headers,
                                    json={'contact_phone': None, 'urgency': 'high'})

        assert response.status_code == 200
        assert response.json()['contact_phone'] is None
        assert response.json()['urgency'] == 'high'

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, imam_auth_headers, mosque):
        need = await self.post_need(client, imam_auth_headers, mosque.id)

        response = await client.delete(f"/api/volunteers/needs/{need['id']}", headers=imam_auth_headers)

        assert response.status_code == 200
        missing = await client.get(f"/api/volunteers/needs/{need['id']}")
        assert missing.status_code == 404


class TestVolunteerOffers:

    @pytest.mark.asyncio
    async def test_user_posts_general_offer(self, client: AsyncClient, test_user, auth_headers):
        response = await client.post('/api/volunteers/offers', headers=auth_headers, json=offer_payload())

        assert response.status_code == 201
        assert response.json()['is_general_offer'] is True
        assert response.json()['contact_email'] == test_user.email

        listing = await client.get('/api/volunteers/offers?type=general')
        assert [o['title'] for o in listing.json()['offers']] == ['Website help']

    @pytest.mark.asyncio
    async def test_targeted_offer_listed_by_mosque(self, client: AsyncClient, auth_headers, mosque):
        await client.post('/api/volunteers/offers', headers=auth_headers,
                          json=offer_payload(target_mosque_id=mosque.id))

        listing = await client.get(f'/api/volunteers/offers?type=mosque-specific&mosque_id={mosque.id}')

        assert len(listing.json()['offers']) == 1
        assert listing.json()['offers'][0]['is_general_offer'] is False

    @pytest.mark.asyncio
    async def test_imam_cannot_post_offer(self, client: AsyncClient, imam_auth_headers):
        response = await client.post('/api/volunteers/offers', headers=imam_auth_headers, json=offer_payload())
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_imam_registers_interest_once(self, client: AsyncClient, auth_headers, imam_auth_headers,
                                                mosque):
        offer = (await client.post('/api/volunteers/offers', headers=auth_headers, json=offer_payload())).json()
        url = f"/api/volunteers/offers/{offer['id']}/interest"

        first = await client.post(url, headers=imam_auth_headers, json={'mosque_id': mosque.id})
        assert first.status_code == 201
        assert [i['mosque_id'] for i in first.json()['interests']] == [mosque.id]

        second = await client.post(url, headers=imam_auth_headers, json={'mosque_id': mosque.id})
        assert second.status_code == 409
        assert second.json()['error']['code'] == 'INTEREST_EXISTS'

    @pytest.mark.asyncio
    async def test_interest_for_someone_elses_mosque_forbidden(self, client: AsyncClient, db_session,
                                                               auth_headers, mosque):
        offer = (await client.post('/api/volunteers/offers', headers=auth_headers, json=offer_payload())).json()
        other_imam = await make_user(db_session, UserRole.IMAM)

        response = await client.post(f"/api/volunteers/offers/{offer['id']}/interest",
                                     headers=headers_for(other_imam), json={'mosque_id': mosque.id})

        assert response.status_code == 403
