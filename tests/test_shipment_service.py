import uuid

import pytest
from sqlalchemy import select, func

from shipflow.models import Shipment, OrderStatus
from shipflow.services.exceptions import (
    ValidationError, OrderNotValidError, CarrierNotFoundError, NoDriverAvailableError,
    ConflictError, NotFoundError
)


async def count_shipments(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count(Shipment.shipment_id)))).scalar()


@pytest.fixture
def create_orders(services, order_data):
    async def create(n: int):
        return [await services.order.create(order_data()) for _ in range(n)]
    return create


async def test_create_shipment_links_orders_and_picks_driver(services, directory, create_orders,
                                                            fetch_order):
    o3, o4 = await create_orders(2)

    created = await services.shipment.create_shipment({
        'order_ids': [o3['order_id'], o4['order_id']],
        'carrier_id': str(directory.c1),
    })

    assert created['driver_id'] in {str(directory.d1), str(directory.d2)}
    assert created['carrier_id'] == str(directory.c1)
    assert created['orders_updated'] == 2

    for order in (o3, o4):
        stored = await fetch_order(order['order_id'])
        assert str(stored.shipment_id) == created['shipment_id']
        assert stored.carrier_id == directory.c1
        assert stored.status == OrderStatus.PENDING

    shipment = await services.shipment.get(created['shipment_id'])
    assert shipment['status'] == 'Pending'
    assert shipment['driver_id'] == created['driver_id']


async def test_create_shipment_overwrites_prior_carrier(services, directory, create_orders, fetch_order):
    (order,) = await create_orders(1)
    await services.order.assign_carrier(order['order_id'], str(directory.c2))

    await services.shipment.create_shipment({
        'order_ids': [order['order_id']],
        'carrier_id': str(directory.c1),
    })

    assert (await fetch_order(order['order_id'])).carrier_id == directory.c1


async def test_create_shipment_is_all_or_nothing(services, directory, create_orders, fetch_order,
                                                session_factory):
    o5, o6 = await create_orders(2)
    await services.delivery.confirm_delivery({'order_id': o5['order_id'], 'proof_data': 'aGVsbG8='})

    with pytest.raises(OrderNotValidError) as exc_info:
        await services.shipment.create_shipment({
            'order_ids': [o5['order_id'], o6['order_id']],
            'carrier_id': str(directory.c1),
        })

    assert exc_info.value.order_id == uuid.UUID(o5['order_id'])
    assert isinstance(exc_info.value, ValidationError)
    assert await count_shipments(session_factory) == 0

    stored_o5 = await fetch_order(o5['order_id'])
    stored_o6 = await fetch_order(o6['order_id'])
    assert stored_o5.status == OrderStatus.DELIVERED
    assert stored_o5.shipment_id is None
    assert stored_o6.shipment_id is None
    assert stored_o6.carrier_id is None


async def test_create_shipment_rejects_unknown_order(services, directory, session_factory):
    with pytest.raises(OrderNotValidError):
        await services.shipment.create_shipment({
            'order_ids': [str(uuid.uuid4())],
            'carrier_id': str(directory.c1),
        })
    assert await count_shipments(session_factory) == 0


async def test_create_shipment_rejects_order_already_in_a_shipment(services, directory, create_orders):
    (order,) = await create_orders(1)
    await services.shipment.create_shipment({'order_ids': [order['order_id']], 'carrier_id': str(directory.c1)})

    with pytest.raises(OrderNotValidError):
        await services.shipment.create_shipment({
            'order_ids': [order['order_id']],
            'carrier_id': str(directory.c1),
        })


@pytest.mark.parametrize('payload, field', [
    ({'order_ids': [], 'carrier_id': None}, 'order_ids'),
    ({'carrier_id': None}, 'order_ids'),
    ({'order_ids': ['not-a-uuid'], 'carrier_id': None}, 'carrier_id'),
])
async def test_create_shipment_validation(services, payload, field):
    with pytest.raises(ValidationError) as exc_info:
        await services.shipment.create_shipment(payload)
    assert exc_info.value.field == field


async def test_create_shipment_rejects_malformed_ids(services, directory, create_orders):
    (order,) = await create_orders(1)
    with pytest.raises(ValidationError):
        await services.shipment.create_shipment({'order_ids': [order['order_id']], 'carrier_id': 'C-1'})
    with pytest.raises(ValidationError) as exc_info:
        await services.shipment.create_shipment({'order_ids': ['O-1'], 'carrier_id': str(directory.c1)})
    assert exc_info.value.field == 'order_ids'


async def test_create_shipment_unknown_carrier(services, create_orders, session_factory, fetch_order):
    (order,) = await create_orders(1)
    with pytest.raises(CarrierNotFoundError):
        await services.shipment.create_shipment({
            'order_ids': [order['order_id']],
            'carrier_id': str(uuid.uuid4()),
        })
    assert await count_shipments(session_factory) == 0
    assert (await fetch_order(order['order_id'])).shipment_id is None


async def test_create_shipment_carrier_without_drivers(services, directory, create_orders,
                                                      session_factory):
    (order,) = await create_orders(1)
    with pytest.raises(NoDriverAvailableError) as exc_info:
        await services.shipment.create_shipment({
            'order_ids': [order['order_id']],
            'carrier_id': str(directory.c2),
        })
    assert isinstance(exc_info.value, ConflictError)
    assert await count_shipments(session_factory) == 0


async def test_create_shipment_collapses_duplicate_ids(services, directory, create_orders):
    (order,) = await create_orders(1)
    created = await services.shipment.create_shipment({
        'order_ids': [order['order_id'], order['order_id'].upper()],
        'carrier_id': str(directory.c1),
    })
    assert created['orders_updated'] == 1


async def test_create_shipment_rolls_back_when_link_is_partial(services, directory, create_orders,
                                                              session_factory, fetch_order, monkeypatch):
    o1, o2 = await create_orders(2)
    await services.order.update(o2['order_id'], {'status': 'InTransit'})

    async def skip_check(order_ids):
        return None

    # Simulasi order yang berubah setelah validasi
    monkeypatch.setattr(services.shipment, '_check_orders_eligible', skip_check)

    with pytest.raises(ConflictError):
        await services.shipment.create_shipment({
            'order_ids': [o1['order_id'], o2['order_id']],
            'carrier_id': str(directory.c1),
        })

    assert await count_shipments(session_factory) == 0
    assert (await fetch_order(o1['order_id'])).shipment_id is None


async def test_driver_choice_uses_every_driver(services, directory, create_orders):
    chosen = set()
    for _ in range(12):
        (order,) = await create_orders(1)
        created = await services.shipment.create_shipment({
            'order_ids': [order['order_id']],
            'carrier_id': str(directory.c1),
        })
        chosen.add(created['driver_id'])
    assert chosen == {str(directory.d1), str(directory.d2)}


# ==================== reads ====================

async def test_shipment_reads(services, directory, create_orders):
    o1, o2 = await create_orders(2)
    created = await services.shipment.create_shipment({
        'order_ids': [o1['order_id'], o2['order_id']],
        'carrier_id': str(directory.c1),
    })

    detail = await services.shipment.get_with_orders(created['shipment_id'])
    assert {o['order_id'] for o in detail['orders']} == {o1['order_id'], o2['order_id']}

    by_driver = await services.shipment.list_shipments(driver_id=created['driver_id'])
    assert [s['shipment_id'] for s in by_driver] == [created['shipment_id']]
    assert await services.shipment.list_shipments(status='InTransit') == []

    by_carrier = await services.shipment.carrier_shipments(str(directory.c1))
    assert by_carrier[0]['order_count'] == 2

    # Manifest hanya berisi shipment yang sedang InTransit
    assert await services.shipment.driver_manifest(created['driver_id']) == []
    await services.order.update(o1['order_id'], {'status': 'InTransit'})
    await services.order.update(o2['order_id'], {'status': 'InTransit'})
    manifest = await services.shipment.driver_manifest(created['driver_id'])
    assert len(manifest) == 1
    assert manifest[0]['status'] == 'InTransit'
    assert len(manifest[0]['orders']) == 2


async def test_shipment_reads_reject_bad_input(services):
    with pytest.raises(NotFoundError):
        await services.shipment.get(str(uuid.uuid4()))
    with pytest.raises(ValidationError):
        await services.shipment.list_shipments(status='Lost')
    with pytest.raises(CarrierNotFoundError):
        await services.shipment.carrier_shipments(str(uuid.uuid4()))
