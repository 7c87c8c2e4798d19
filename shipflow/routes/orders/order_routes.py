from fastapi import APIRouter, Depends, status, Query, Body
from typing import Optional, Dict, Any

from shipflow.dependencies import get_service_registry
from shipflow.responses import APIResponse
from shipflow.services import ServiceRegistry

order_router = APIRouter()

@order_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a new order"
)
async def create_order(
    order_data: Dict[str, Any] = Body(...),
    services: ServiceRegistry = Depends(get_service_registry)
):
    """
    Create a new order in 'Pending' status, without carrier or shipment.
    Customer and warehouse staff are notified.
    """
    new_order = await services.order.create(order_data)
    return APIResponse.success(data=new_order, message="Order created successfully")

@order_router.get(
    "",
    summary="Get a list of orders"
)
async def get_all_orders(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None),
    customer_id: Optional[str] = Query(None),
    services: ServiceRegistry = Depends(get_service_registry)
):
    """
    Get a paginated list of orders, newest first.
    """
    result = await services.order.list_orders(
        status=status, customer_id=customer_id, page=page, per_page=per_page
    )
    return APIResponse.paginated(data=result['items'], pagination=result['pagination'])

@order_router.get(
    "/track/{tracking_id}",
    summary="Track an order by its public tracking id"
)
async def track_order(
    tracking_id: str,
    services: ServiceRegistry = Depends(get_service_registry)
):
    tracking = await services.order.track(tracking_id)
    return APIResponse.success(data=tracking)

@order_router.get(
    "/customer/{customer_id}",
    summary="Get all orders of a customer"
)
async def get_customer_orders(
    customer_id: str,
    services: ServiceRegistry = Depends(get_service_registry)
):
    orders = await services.order.list_customer_orders(customer_id)
    return APIResponse.success(data=orders)

@order_router.post(
    "/confirm-delivery",
    summary="Confirm delivery with proof of delivery"
)
async def confirm_delivery(
    confirmation: Dict[str, Any] = Body(...),
    services: ServiceRegistry = Depends(get_service_registry)
):
    """
    Store the base64 proof of delivery (photo or signature) and mark the order
    as 'Delivered'.
    """
    result = await services.delivery.confirm_delivery(confirmation)
    return APIResponse.success(data=result, message="Delivery confirmed successfully")

@order_router.post(
    "/report-anomaly",
    summary="Report a delivery anomaly"
)
async def report_anomaly(
    report: Dict[str, Any] = Body(...),
    services: ServiceRegistry = Depends(get_service_registry)
):
    """
    Mark the order as 'Failed' with the reported message. CSRs, the customer
    and warehouse staff are notified.
    """
    result = await services.anomaly.report_anomaly(report)
    return APIResponse.success(data=result, message="Anomaly reported successfully")

@order_router.get(
    "/{order_id}",
    summary="Get a single order"
)
async def get_order_by_id(
    order_id: str,
    services: ServiceRegistry = Depends(get_service_registry)
):
    order = await services.order.get(order_id)
    return APIResponse.success(data=order)

@order_router.patch(
    "/{order_id}/assign",
    summary="Assign a carrier to an order"
)
async def assign_carrier(
    order_id: str,
    carrier_id: str = Query(...),
    services: ServiceRegistry = Depends(get_service_registry)
):
    """
    One-shot carrier assignment. Fails with 409 if the order already has a carrier.
    """
    order = await services.order.assign_carrier(order_id, carrier_id)
    return APIResponse.success(data=order, message="Carrier assigned successfully")

@order_router.put(
    "/{order_id}",
    summary="Update an order"
)
async def update_order(
    order_id: str,
    order_data: Dict[str, Any] = Body(...),
    services: ServiceRegistry = Depends(get_service_registry)
):
    """
    Update addresses, weight, carrier and/or status. Moving the order to
    'InTransit' reconciles its shipment.
    """
    order = await services.order.update(order_id, order_data)
    return APIResponse.success(data=order, message="Order updated successfully")
