"""
Unit Tests for business verification, halal certification and volunteer review flows
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from mosqueconnect.models import (
    ActivityLog,
    Business,
    HalalCertification,
    Offer,
    User,
    UserRole,
    VolunteerStatus,
)

from conftest import make_offer, make_user, headers_for


def registration_payload(**overrides):
    payload = {
        'owner_name': 'Omar Siddiqui',
        'email': 'omar@crescentmeats.com',
        'password': 'halalmeat1',
        'business': {
            'name': 'Crescent Meats',
            'category': 'grocery',
            'street': '88 Market St',
            'city': 'Paterson',
            'state': 'NJ',
            'zip_code': '07501',
        },
        'request_halal_certification': True,
        'halal_certification': {'supplier_info': 'Zabiha farms, PA'},
    }
    payload.update(overrides)
    return payload


class TestBusinessRegistration:

    @pytest.mark.asyncio
    async def test_register_creates_owner_business_and_request(self, client: AsyncClient, db_session):
        response = await client.post('/api/business/register', json=registration_payload())

        assert response.status_code == 201
        data = response.json()
        assert data['business']['verification_status'] == 'pending'
        assert data['halal_certification_id']

        certification = await db_session.get(HalalCertification, data['halal_certification_id'])
        assert certification.business_name == 'Crescent Meats'
        assert certification.postcode == '07501'
        assert certification.supplier_info == 'Zabiha farms, PA'

        login = await client.post('/api/auth/login', json={'email': 'omar@crescentmeats.com',
                                                          'password': 'halalmeat1'})
        assert login.json()['user']['role'] == 'business'

    @pytest.mark.asyncio
    async def test_register_without_halal_request(self, client: AsyncClient):
        response = await client.post('/api/business/register',
                                     json=registration_payload(request_halal_certification=False))

        assert response.status_code == 201
        assert response.json()['halal_certification_id'] is None

    @pytest.mark.asyncio
    async def test_duplicate_owner_email(self, client: AsyncClient, test_user):
        response = await client.post('/api/business/register', json=registration_payload(email=test_user.email))
        assert response.status_code == 409


class TestBusinessVerification:

    @pytest.mark.asyncio
    async def test_admin_verifies_with_approved_alias(self, client: AsyncClient, business, admin_auth_headers):
        response = await client.patch(f'/api/admin/businesses/{business.id}', headers=admin_auth_headers,
                                      json={'status': 'approved'})

        assert response.status_code == 200
        assert response.json()['verification_status'] == 'verified'

    @pytest.mark.asyncio
    async def test_imam_cannot_verify_business(self, client: AsyncClient, business, imam_auth_headers):
        response = await client.patch(f'/api/admin/businesses/{business.id}', headers=imam_auth_headers,
                                      json={'status': 'verified'})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_suspend_business_hides_shop(self, client: AsyncClient, db_session, business, admin_auth_headers):
        response = await client.patch(f'/api/admin/businesses/{business.id}/status', headers=admin_auth_headers,
                                      json={'status': 'suspended', 'featured': True})

        assert response.status_code == 200
        assert response.json()['status'] == 'suspended'
        assert response.json()['featured'] is True

        log = (await db_session.execute(select(ActivityLog))).scalars().one()
        assert log.action == 'UPDATE_BUSINESS_STATUS'
        assert log.changes['status'] == {'from': 'active', 'to': 'suspended'}

        shop = await client.get(f'/api/shop/{business.id}')
        assert shop.status_code == 404


class TestHalalCertificationReview:

    async def submit(self, client: AsyncClient) -> str:
        response = await client.post('/api/business/register', json=registration_payload())
        return response.json()['halal_certification_id']

    @pytest.mark.asyncio
    async def test_imam_certifies_business(self, client: AsyncClient, db_session, imam_user, imam_auth_headers):
        certification_id = await self.submit(client)
        url = f'/api/imam/halal-certification-requests/{certification_id}'

        listing = await client.get('/api/imam/halal-certification-requests?status=pending', headers=imam_auth_headers)
        assert [c['id'] for c in listing.json()['certifications']] == [certification_id]

        started = await client.patch(url, headers=imam_auth_headers, json={'status': 'under_review'})
        assert started.status_code == 200
        assert started.json()['message'] == 'Certification under review'

        approved = await client.patch(url, headers=imam_auth_headers, json={'status': 'approved'})
        assert approved.status_code == 200
        certification = approved.json()['certification']
        assert certification['status'] == 'approved'
        assert certification['reviewer_id'] == imam_user.id
        assert certification['expiry_date'] is not None

        business = await db_session.get(Business, certification['business_id'])
        await db_session.refresh(business)
        assert business.is_halal_certified is True

    @pytest.mark.asyncio
    async def test_cannot_skip_under_review(self, client: AsyncClient, admin_auth_headers):
        certification_id = await self.submit(client)

        response = await client.patch(f'/api/admin/halal-certifications/{certification_id}',
                                      headers=admin_auth_headers, json={'status': 'approved'})

        assert response.status_code == 409
        assert response.json()['error']['details']['allowed'] == ['under_review']

    @pytest.mark.asyncio
    async def test_business_owner_cannot_certify_itself(self, client: AsyncClient, db_session):
        certification_id = await self.submit(client)
        owner = (await db_session.execute(
            select(Business).where(Business.name == 'Crescent Meats')
        )).scalar_one()
        owner_user = await db_session.get(User, owner.owner_id)

        response = await client.patch(f'/api/imam/halal-certification-requests/{certification_id}',
                                      headers=headers_for(owner_user), json={'status': 'under_review'})

        assert response.status_code == 403


class TestVolunteerReview:

    def volunteer_payload(self, mosque_id=None):
        return {
            'name': 'Bilal Ahmed',
            'email': 'bilal@example.com',
            'skills': ['teaching', 'cooking'],
            'availability': 'Weekends',
            'mosque_id': mosque_id,
        }

    @pytest.mark.asyncio
    async def test_register_then_imam_approves(self, client: AsyncClient, db_session, test_user, auth_headers,
                                               pending_mosque, imam_auth_headers):
        registered = await client.post('/api/volunteer/register', headers=auth_headers,
                                       json=self.volunteer_payload(pending_mosque.id))
        assert registered.status_code == 201
        volunteer_id = registered.json()['id']
        assert registered.json()['status'] == 'pending'

        listing = await client.get('/api/imam/volunteers', headers=imam_auth_headers)
        assert [v['id'] for v in listing.json()['volunteers']] == [volunteer_id]

        response = await client.patch(f'/api/imam/volunteers/{volunteer_id}', headers=imam_auth_headers,
                                      json={'status': 'approved', 'notes': 'Welcome aboard'})

        assert response.status_code == 200
        assert response.json()['status'] == 'approved'
        await db_session.refresh(test_user)
        assert test_user.volunteer_status == VolunteerStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_other_imam_cannot_review(self, client: AsyncClient, db_session, auth_headers, pending_mosque):
        other_imam = await make_user(db_session, UserRole.IMAM)
        registered = await client.post('/api/volunteer/register', headers=auth_headers,
                                       json=self.volunteer_payload(pending_mosque.id))

        response = await client.patch(f"/api/imam/volunteers/{registered.json()['id']}",
                                      headers=headers_for(other_imam), json={'status': 'approved'})

        assert response.status_code == 403

        listing = await client.get('/api/imam/volunteers', headers=headers_for(other_imam))
        assert listing.json()['volunteers'] == []

    @pytest.mark.asyncio
    async def test_volunteer_without_mosque_is_admin_only(self, client: AsyncClient, auth_headers,
                                                          imam_auth_headers, admin_auth_headers):
        registered = await client.post('/api/volunteer/register', headers=auth_headers,
                                       json=self.volunteer_payload())
        url = f"/api/admin/volunteers/{registered.json()['id']}"

        imam_response = await client.patch(f"/api/imam/volunteers/{registered.json()['id']}",
                                           headers=imam_auth_headers, json={'status': 'approved'})
        assert imam_response.status_code == 403

        admin_response = await client.patch(url, headers=admin_auth_headers, json={'status': 'rejected'})
        assert admin_response.status_code == 200
        assert admin_response.json()['status'] == 'rejected'

    @pytest.mark.asyncio
    async def test_cannot_register_twice_while_pending(self, client: AsyncClient, auth_headers):
        await client.post('/api/volunteer/register', headers=auth_headers, json=self.volunteer_payload())

        response = await client.post('/api/volunteer/register', headers=auth_headers, json=self.volunteer_payload())

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_only_community_members_register(self, client: AsyncClient, imam_auth_headers):
        response = await client.post('/api/volunteer/register', headers=imam_auth_headers,
                                     json=self.volunteer_payload())
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_mosque_is_404(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/volunteer/register', headers=auth_headers,
                                     json=self.volunteer_payload('1b2c3d4e-5f60-4a7b-8c9d-0e1f2a3b4c5d'))
        assert response.status_code == 404


class TestBusinessDeletion:

    @pytest.mark.asyncio
    async def test_delete_removes_offers(self, client: AsyncClient, db_session, business, admin_auth_headers):
        offer = await make_offer(db_session, business)
        business_id, offer_id = business.id, offer.id

        response = await client.delete(f'/api/admin/businesses/{business_id}', headers=admin_auth_headers)

        assert response.status_code == 200
        db_session.expunge_all()
        assert await db_session.get(Business, business_id) is None
        assert await db_session.get(Offer, offer_id) is None
