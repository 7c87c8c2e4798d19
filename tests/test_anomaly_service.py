import base64
import uuid

import pytest

from shipflow.models import OrderStatus
from shipflow.services.exceptions import ValidationError, NotFoundError


async def test_report_anomaly_marks_order_failed(services, order_data, directory, fetch_order):
    order = await services.order.create(order_data())
    shipment = await services.shipment.create_shipment({
        'order_ids': [order['order_id']], 'carrier_id': str(directory.c1)
    })

    result = await services.anomaly.report_anomaly({
        'order_id': order['order_id'], 'error_message': 'package damaged'
    })

    assert result == {
        'success': True,
        'order_id': order['order_id'],
        'error_message': 'package damaged',
        'new_status': 'Failed',
    }
    stored = await fetch_order(order['order_id'])
    assert stored.status == OrderStatus.FAILED
    assert stored.error_message == 'package damaged'
    assert stored.carrier_id == directory.c1
    assert str(stored.shipment_id) == shipment['shipment_id']


async def test_report_anomaly_notifies_csr_customer_and_staff(services, order_data, directory,
                                                             recording_transport):
    order = await services.order.create(order_data())
    recording_transport.sent.clear()

    await services.anomaly.report_anomaly({'order_id': order['order_id'], 'error_message': 'package damaged'})

    failures = recording_transport.of_type('DELIVERY_EXCEPTION')
    recipients = [p['user_id'] for p in failures]
    assert sorted(recipients) == sorted(
        [str(directory.csr), str(directory.customer)] + [str(s) for s in directory.staff]
    )

    csr_payload = [p for p in failures if p['user_id'] == str(directory.csr)][0]
    assert csr_payload['metadata']['customerEmail'] == 'alice@example.com'
    assert csr_payload['metadata']['anomalyType'] == 'Delivery anomaly'
    assert 'package damaged' in csr_payload['message']
    assert all(p['severity'] == 'ERROR' for p in failures)


async def test_report_anomaly_unknown_customer_email_uses_placeholder(services, order_data, directory,
                                                                     recording_transport):
    order = await services.order.create(order_data(customer_id=str(uuid.uuid4())))
    recording_transport.sent.clear()

    await services.anomaly.report_anomaly({'order_id': order['order_id'], 'error_message': 'lost'})

    csr_payload = [p for p in recording_transport.of_type('DELIVERY_EXCEPTION')
                   if p['user_id'] == str(directory.csr)][0]
    assert csr_payload['metadata']['customerEmail'] == 'Email not available'


async def test_report_anomaly_succeeds_when_notifications_are_down(failing_services, order_data,
                                                                  failing_transport, fetch_order):
    order = await failing_services.order.create(order_data())

    result = await failing_services.anomaly.report_anomaly({
        'order_id': order['order_id'], 'error_message': 'package damaged'
    })

    assert result['success'] is True
    assert result['new_status'] == 'Failed'
    assert failing_transport.attempts > 0
    stored = await fetch_order(order['order_id'])
    assert stored.status == OrderStatus.FAILED
    assert stored.error_message == 'package damaged'


@pytest.mark.parametrize('payload, field', [
    ({'error_message': 'package damaged'}, 'order_id'),
    ({'order_id': '  ', 'error_message': 'package damaged'}, 'order_id'),
    ({'order_id': str(uuid.uuid4())}, 'error_message'),
    ({'order_id': str(uuid.uuid4()), 'error_message': '   '}, 'error_message'),
])
async def test_report_anomaly_validation(services, payload, field):
    with pytest.raises(ValidationError) as exc_info:
        await services.anomaly.report_anomaly(payload)
    assert exc_info.value.field == field


async def test_report_anomaly_unknown_order(services):
    with pytest.raises(NotFoundError):
        await services.anomaly.report_anomaly({
            'order_id': str(uuid.uuid4()), 'error_message': 'package damaged'
        })


async def test_report_anomaly_on_delivered_order_drops_proof(services, order_data, fetch_order):
    order = await services.order.create(order_data())
    await services.delivery.confirm_delivery({
        'order_id': order['order_id'], 'proof_data': base64.b64encode(b"hello").decode()
    })

    await services.anomaly.report_anomaly({'order_id': order['order_id'], 'error_message': 'damaged'})

    stored = await fetch_order(order['order_id'])
    assert stored.status == OrderStatus.FAILED
    assert stored.error_message == 'damaged'
    assert stored.proof_of_delivery is None
    assert stored.actual_delivery_time is None
