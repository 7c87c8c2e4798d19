import base64
import random
import uuid

import httpx
import pytest
import pytest_asyncio

from shipflow import create_app
from shipflow.database import get_db_session


@pytest_asyncio.fixture
async def client(session_factory, directory, recording_transport):
    app = create_app(notification_transport=recording_transport, rng=random.Random(3))

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def new_order(client, directory):
    async def create(**overrides):
        body = {
            'customer_id': str(directory.customer),
            'origin_address': 'Rua A, 1, Lisboa',
            'destination_address': 'Rua B, 2, Porto',
            'weight': 1.5,
        }
        body.update(overrides)
        response = await client.post("/api/orders", json=body)
        assert response.status_code == 201
        return response.json()['data']
    return create


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()['status'] == 'healthy'
    assert 'X-Request-ID' in response.headers


async def test_create_order_endpoint(client, new_order, recording_transport):
    order = await new_order()

    assert order['status'] == 'Pending'
    assert order['tracking_id'].startswith('TRK')
    assert len(recording_transport.of_type('ORDER_CREATED')) == 3


async def test_validation_error_envelope(client):
    response = await client.post("/api/orders", json={'origin_address': 'x'})

    assert response.status_code == 400
    body = response.json()
    assert body['success'] is False
    assert body['error_code'] == 'VALIDATION_ERROR'
    assert body['details']['field']
    assert body['request_id'] == response.headers['X-Request-ID']


async def test_assign_carrier_twice_conflicts(client, new_order, directory):
    order = await new_order()
    url = f"/api/orders/{order['order_id']}/assign"

    first = await client.patch(url, params={'carrier_id': str(directory.c1)})
    assert first.status_code == 200
    assert first.json()['data']['carrier_id'] == str(directory.c1)
    assert first.json()['data']['status'] == 'Pending'

    second = await client.patch(url, params={'carrier_id': str(directory.c1)})
    assert second.status_code == 409
    assert second.json()['error_code'] == 'CONFLICT_ERROR'


async def test_unknown_order_is_404(client):
    response = await client.get(f"/api/orders/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()['error_code'] == 'NOT_FOUND'


async def test_update_order_endpoint(client, new_order, directory):
    order = await new_order()

    response = await client.put(
        f"/api/orders/{order['order_id']}",
        json={'carrier_id': str(directory.c1), 'status': 'InTransit'}
    )

    assert response.status_code == 200
    data = response.json()['data']
    assert data['status'] == 'InTransit'
    assert data['carrier_id'] == str(directory.c1)


async def test_shipment_flow(client, new_order, directory):
    o1, o2 = await new_order(), await new_order()

    response = await client.post("/api/shipments/create", json={
        'order_ids': [o1['order_id'], o2['order_id']],
        'carrier_id': str(directory.c1),
    })
    assert response.status_code == 201
    created = response.json()['data']
    assert created['orders_updated'] == 2
    assert created['driver_id'] in {str(directory.d1), str(directory.d2)}

    for order in (o1, o2):
        await client.put(f"/api/orders/{order['order_id']}", json={'status': 'InTransit'})

    detail = (await client.get(f"/api/shipments/{created['shipment_id']}")).json()['data']
    assert detail['status'] == 'InTransit'
    assert len(detail['orders']) == 2

    manifest = (await client.get(f"/api/shipments/driver/{created['driver_id']}/manifest")).json()['data']
    assert [s['shipment_id'] for s in manifest] == [created['shipment_id']]

    by_carrier = (await client.get(f"/api/shipments/carrier/{directory.c1}")).json()['data']
    assert by_carrier[0]['order_count'] == 2


async def test_shipment_with_ineligible_order_is_rejected(client, new_order, directory):
    order = await new_order()
    await client.put(f"/api/orders/{order['order_id']}", json={'status': 'InTransit'})

    response = await client.post("/api/shipments/create", json={
        'order_ids': [order['order_id']],
        'carrier_id': str(directory.c1),
    })

    assert response.status_code == 400
    assert response.json()['error_code'] == 'ORDER_NOT_VALID'
    assert (await client.get("/api/shipments")).json()['data'] == []


async def test_shipment_for_carrier_without_drivers(client, new_order, directory):
    order = await new_order()

    response = await client.post("/api/shipments/create", json={
        'order_ids': [order['order_id']],
        'carrier_id': str(directory.c2),
    })

    assert response.status_code == 409
    assert response.json()['error_code'] == 'NO_DRIVER_AVAILABLE'


async def test_confirm_delivery_and_track(client, new_order):
    order = await new_order()
    proof = base64.b64encode(b"signature-bytes").decode()

    response = await client.post("/api/orders/confirm-delivery", json={
        'order_id': order['order_id'],
        'proof_data': proof,
        'proof_type': 'signature',
    })
    assert response.status_code == 200
    assert response.json()['data']['success'] is True

    tracking = (await client.get(f"/api/orders/track/{order['tracking_id']}")).json()['data']
    assert tracking['status'] == 'Delivered'
    assert tracking['proof_of_delivery'] == proof
    assert tracking['actual_delivery_time'] is not None


async def test_confirm_delivery_bad_base64(client, new_order):
    order = await new_order()

    response = await client.post("/api/orders/confirm-delivery", json={
        'order_id': order['order_id'], 'proof_data': '%%%'
    })

    assert response.status_code == 400
    assert response.json()['details']['field'] == 'proof_data'


async def test_report_anomaly_endpoint(client, new_order):
    order = await new_order()

    response = await client.post("/api/orders/report-anomaly", json={
        'order_id': order['order_id'], 'error_message': 'package damaged'
    })

    assert response.status_code == 200
    data = response.json()['data']
    assert data['new_status'] == 'Failed'
    assert data['error_message'] == 'package damaged'


async def test_customer_orders_and_listing(client, new_order, directory):
    await new_order()
    await new_order()

    mine = (await client.get(f"/api/orders/customer/{directory.customer}")).json()['data']
    assert len(mine) == 2

    listing = (await client.get("/api/orders", params={'per_page': 1})).json()
    assert len(listing['data']) == 1
    assert listing['pagination']['total'] == 2


async def test_carrier_directory_endpoints(client, directory):
    carriers = (await client.get("/api/carriers")).json()['data']
    assert {c['name'] for c in carriers} == {'Fast Freight', 'Slow Boat'}

    drivers = (await client.get(f"/api/carriers/{directory.c1}/drivers")).json()['data']
    assert {d['driver_id'] for d in drivers} == {str(directory.d1), str(directory.d2)}

    missing = await client.get(f"/api/carriers/{uuid.uuid4()}/drivers")
    assert missing.status_code == 404
    assert missing.json()['error_code'] == 'CARRIER_NOT_FOUND'
