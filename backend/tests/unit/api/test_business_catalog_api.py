"""
Unit Tests for business products, announcements, profile and the public shop
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient

from mosqueconnect.models import Announcement, Business, BusinessCategory, Product, ProductStatus, UserRole

from conftest import make_offer, make_user, headers_for


async def make_product(db, business: Business, **overrides) -> Product:
    product = Product(
        business_id=business.id,
        name=overrides.pop('name', 'Medjool Dates'),
        price=overrides.pop('price', 12.5),
        category=overrides.pop('category', 'dates'),
        stock=overrides.pop('stock', 25),
        **overrides
    )
    db.add(product)
    await db.commit()
    await db.refresh(product)
    return product


class TestBusinessProducts:

    @pytest.mark.asyncio
    async def test_create_refreshes_product_count(self, client: AsyncClient, db_session, business,
                                                  business_auth_headers):
        response = await client.post('/api/business/products', headers=business_auth_headers, json={
            'name': 'Basmati Rice',
            'price': 18.0,
            'compare_at_price': 24.0,
            'category': 'rice',
            'stock': 40,
            'images': [{'url': 'https://img.example/rice.jpg'}],
        })

        assert response.status_code == 201
        data = response.json()
        assert data['business_id'] == business.id
        assert data['discount_percentage'] == 25
        assert data['primary_image']['url'] == 'https://img.example/rice.jpg'
        assert data['availability_status'] == 'in_stock'

        await db_session.refresh(business)
        assert business.total_products == 1

    @pytest.mark.asyncio
    async def test_created_product_reads_back(self, client: AsyncClient, business, business_auth_headers):
        created = await client.post('/api/business/products', headers=business_auth_headers, json={
            'name': 'Zamzam Water', 'price': 3.5, 'category': 'drinks', 'tags': ['hajj'],
        })

        response = await client.get(f"/api/business/products/{created.json()['id']}",
                                    headers=business_auth_headers)

        assert response.status_code == 200
        assert response.json()['name'] == 'Zamzam Water'
        assert response.json()['tags'] == ['hajj']

    @pytest.mark.asyncio
    async def test_update_and_clear_description(self, client: AsyncClient, db_session, business,
                                                business_auth_headers):
        product = await make_product(db_session, business, description='Sweet and soft')
        url = f'/api/business/products/{product.id}'

        response = await client.put(url, headers=business_auth_headers,
                                    json={'price': 15, 'description': None})

        assert response.status_code == 200
        assert response.json()['price'] == 15
        assert response.json()['description'] is None

    @pytest.mark.asyncio
    async def test_null_price_rejected(self, client: AsyncClient, db_session, business, business_auth_headers):
        product = await make_product(db_session, business)

        response = await client.put(f'/api/business/products/{product.id}', headers=business_auth_headers,
                                    json={'price': None})

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'
        await db_session.refresh(product)
        assert product.price == 12.5

    @pytest.mark.asyncio
    async def test_delete_refreshes_product_count(self, client: AsyncClient, db_session, business,
                                                  business_auth_headers):
        response = await client.post('/api/business/products', headers=business_auth_headers,
                                     json={'name': 'Halva', 'price': 6, 'category': 'sweets'})
        product_id = response.json()['id']

        deleted = await client.delete(f'/api/business/products/{product_id}', headers=business_auth_headers)

        assert deleted.status_code == 200
        await db_session.refresh(business)
        assert business.total_products == 0
        missing = await client.get(f'/api/business/products/{product_id}', headers=business_auth_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient, db_session, business, business_auth_headers):
        await make_product(db_session, business, stock=0, views=4)
        await make_product(db_session, business, name='Ajwa Dates', stock=3, price=20, featured=True)
        await make_product(db_session, business, name='Basmati Rice', category='rice',
                           status=ProductStatus.INACTIVE, price=8)

        response = await client.get('/api/business/products/stats', headers=business_auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['total_products'] == 3
        assert data['active_products'] == 2
        assert data['inactive_products'] == 1
        assert data['out_of_stock_products'] == 1
        assert data['low_stock_products'] == 1
        assert data['featured_products'] == 1
        assert data['total_views'] == 4
        assert data['categories'] == {'dates': 2, 'rice': 1}

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, client: AsyncClient, db_session, business,
                                                     business_auth_headers):
        await make_product(db_session, business, name='Saffron_Gold')
        await make_product(db_session, business, name='Basmati Rice')

        underscore = await client.get('/api/business/products?search=_', headers=business_auth_headers)
        percent = await client.get('/api/business/products?search=%25', headers=business_auth_headers)

        assert [p['name'] for p in underscore.json()['products']] == ['Saffron_Gold']
        assert percent.json()['products'] == []

    @pytest.mark.asyncio
    async def test_other_business_product_is_hidden(self, client: AsyncClient, db_session, business):
        product = await make_product(db_session, business)
        other_owner = await make_user(db_session, UserRole.BUSINESS)
        db_session.add(Business(name='Other Shop', category=BusinessCategory.BOOKS, owner_id=other_owner.id,
                                street='1 Elm St', city='Houston', state='TX'))
        await db_session.commit()

        response = await client.get(f'/api/business/products/{product.id}', headers=headers_for(other_owner))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_plain_user_forbidden(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/business/products', headers=auth_headers)
        assert response.status_code == 403


class TestBusinessAnnouncements:

    @pytest.mark.asyncio
    async def test_crud(self, client: AsyncClient, db_session, business, business_auth_headers):
        created = await client.post('/api/business/announcements', headers=business_auth_headers, json={
            'title': 'Ramadan hours',
            'content': 'Open until 2am every night',
            'type': 'event',
        })
        assert created.status_code == 201
        announcement_id = created.json()['id']
        assert created.json()['business_id'] == business.id
        assert created.json()['is_admin_announcement'] is False

        listing = await client.get('/api/business/announcements', headers=business_auth_headers)
        assert [a['id'] for a in listing.json()['announcements']] == [announcement_id]

        updated = await client.put(f'/api/business/announcements/{announcement_id}',
                                   headers=business_auth_headers, json={'priority': 'high'})
        assert updated.status_code == 200
        assert updated.json()['priority'] == 'high'

        public = await client.get(f'/api/announcements/public?business_id={business.id}')
        assert [a['id'] for a in public.json()['announcements']] == [announcement_id]

        deleted = await client.delete(f'/api/business/announcements/{announcement_id}',
                                      headers=business_auth_headers)
        assert deleted.status_code == 200
        missing = await client.get(f'/api/business/announcements/{announcement_id}',
                                   headers=business_auth_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_null_title_rejected(self, client: AsyncClient, business, business_auth_headers):
        created = await client.post('/api/business/announcements', headers=business_auth_headers,
                                    json={'title': 'Sale', 'content': 'Everything 10% off'})

        response = await client.put(f"/api/business/announcements/{created.json()['id']}",
                                    headers=business_auth_headers, json={'title': None})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_end_before_start_rejected(self, client: AsyncClient, business, business_auth_headers):
        created = await client.post('/api/business/announcements', headers=business_auth_headers,
                                    json={'title': 'Sale', 'content': 'Everything 10% off'})

        response = await client.put(f"/api/business/announcements/{created.json()['id']}",
                                    headers=business_auth_headers,
                                    json={'end_date': (datetime.utcnow() - timedelta(days=1)).isoformat()})

        assert response.status_code == 400
        assert response.json()['error']['details'] == {'field': 'end_date'}


class TestBusinessProfile:

    @pytest.mark.asyncio
    async def test_get_profile(self, client: AsyncClient, business, business_auth_headers):
        response = await client.get('/api/business/profile', headers=business_auth_headers)

        assert response.status_code == 200
        assert response.json()['id'] == business.id
        assert response.json()['name'] == 'Crescent Grocery'

    @pytest.mark.asyncio
    async def test_update_then_clear_website(self, client: AsyncClient, business, business_auth_headers):
        updated = await client.put('/api/business/profile', headers=business_auth_headers, json={
            'website': 'https://crescent.example',
            'tags': ['Halal', ' Meat ', ''],
        })
        assert updated.status_code == 200
        assert updated.json()['website'] == 'https://crescent.example'
        assert updated.json()['tags'] == ['halal', 'meat']

        cleared = await client.put('/api/business/profile', headers=business_auth_headers, json={'website': None})
        assert cleared.status_code == 200
        assert cleared.json()['website'] is None
        assert cleared.json()['tags'] == ['halal', 'meat']

    @pytest.mark.asyncio
    async def test_null_name_rejected(self, client: AsyncClient, business, business_auth_headers):
        response = await client.put('/api/business/profile', headers=business_auth_headers,
                                    json={'name': None, 'city': None})

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'

    @pytest.mark.asyncio
    async def test_plain_user_forbidden(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/business/profile', headers=auth_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_analytics(self, client: AsyncClient, db_session, business, business_auth_headers):
        await make_product(db_session, business, views=5, revenue=40.0)
        await make_product(db_session, business, name='Ajwa Dates', stock=0, views=2)
        await make_offer(db_session, business, used_count=3)
        db_session.add(Announcement(title='Open late', content='Friday nights', business_id=business.id,
                                    created_by=business.owner_id, start_date=datetime.utcnow()))
        await db_session.commit()

        response = await client.get('/api/business/analytics', headers=business_auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['business_id'] == business.id
        assert data['total_products'] == 2
        assert data['out_of_stock_products'] == 1
        assert data['product_views'] == 7
        assert data['revenue'] == 40.0
        assert data['total_offers'] == 1
        assert data['active_offers'] == 1
        assert data['total_offer_redemptions'] == 3
        assert data['total_announcements'] == 1
        assert data['active_announcements'] == 1


class TestShopProducts:

    @pytest.mark.asyncio
    async def test_lists_only_active_products(self, client: AsyncClient, db_session, business):
        await make_product(db_session, business, name='Ajwa Dates', price=20)
        await make_product(db_session, business, name='Basmati Rice', price=8)
        await make_product(db_session, business, name='Old Stock', status=ProductStatus.INACTIVE)

        response = await client.get(f'/api/shop/{business.id}/products?sort=price_low')

        assert response.status_code == 200
        assert [p['name'] for p in response.json()['products']] == ['Basmati Rice', 'Ajwa Dates']

        cheap = await client.get(f'/api/shop/{business.id}/products?max_price=10')
        assert [p['name'] for p in cheap.json()['products']] == ['Basmati Rice']

    @pytest.mark.asyncio
    async def test_inactive_product_detail_is_404(self, client: AsyncClient, db_session, business):
        product = await make_product(db_session, business, status=ProductStatus.INACTIVE)

        response = await client.get(f'/api/shop/{business.id}/products/{product.id}')

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_view_counter(self, client: AsyncClient, db_session, business):
        product = await make_product(db_session, business)
        url = f'/api/shop/{business.id}/products/{product.id}/view'

        await client.post(url)
        response = await client.post(url)

        assert response.status_code == 200
        assert response.json() == {'product_id': product.id, 'views': 2}

    @pytest.mark.asyncio
    async def test_product_of_other_shop_is_404(self, client: AsyncClient, db_session, business, admin_user):
        other = Business(name='Other Shop', category=business.category, owner_id=admin_user.id,
                         street='1 Elm St', city='Houston', state='TX')
        db_session.add(other)
        await db_session.commit()
        product = await make_product(db_session, business)

        response = await client.get(f'/api/shop/{other.id}/products/{product.id}')

        assert response.status_code == 404


class TestOfferMinimumPurchase:

    @pytest.mark.asyncio
    async def test_amount_below_minimum_does_not_use_offer(self, client: AsyncClient, db_session, business,
                                                           auth_headers):
        offer = await make_offer(db_session, business, minimum_purchase=50, usage_limit=5)
        url = f'/api/shop/{business.id}/offers/{offer.id}/use'

        response = await client.post(url, headers=auth_headers, json={'amount': 20})

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'OFFER_NOT_VALID'
        await db_session.refresh(offer)
        assert offer.used_count == 0

        accepted = await client.post(url, headers=auth_headers, json={'amount': 60})
        assert accepted.status_code == 200
        assert accepted.json()['discount'] == 6
        assert accepted.json()['offer']['used_count'] == 1

    @pytest.mark.asyncio
    async def test_null_title_on_offer_update_rejected(self, client: AsyncClient, db_session, business,
                                                       business_auth_headers):
        offer = await make_offer(db_session, business)

        response = await client.put(f'/api/business/offers/{offer.id}', headers=business_auth_headers,
                                    json={'title': None})

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'
