from fastapi import APIRouter, Depends, status, Query, Body
from typing import Optional, Dict, Any

from shipflow.dependencies import get_service_registry
from shipflow.responses import APIResponse
from shipflow.services import ServiceRegistry

shipment_router = APIRouter()

@shipment_router.post(
    "/create",
    status_code=status.HTTP_201_CREATED,
    summary="Create a shipment from a batch of pending orders"
)
async def create_shipment(
    shipment_data: Dict[str, Any] = Body(...),
    services: ServiceRegistry = Depends(get_service_registry)
):
    """
    Group pending orders into a new shipment for one carrier. A random driver
    of the carrier is assigned. All orders are linked or none are.
    """
    created = await services.shipment.create_shipment(shipment_data)
    return APIResponse.success(data=created, message="Shipment created successfully")

@shipment_router.get(
    "",
    summary="Get a list of shipments"
)
async def get_all_shipments(
    status: Optional[str] = Query(None),
    carrier_id: Optional[str] = Query(None),
    driver_id: Optional[str] = Query(None),
    services: ServiceRegistry = Depends(get_service_registry)
):
    shipments = await services.shipment.list_shipments(
        status=status, carrier_id=carrier_id, driver_id=driver_id
    )
    return APIResponse.success(data=shipments)

@shipment_router.get(
    "/driver/{driver_id}",
    summary="Get all shipments assigned to a driver"
)
async def get_driver_shipments(
    driver_id: str,
    status: Optional[str] = Query(None),
    services: ServiceRegistry = Depends(get_service_registry)
):
    shipments = await services.shipment.list_shipments(status=status, driver_id=driver_id)
    return APIResponse.success(data=shipments)

@shipment_router.get(
    "/driver/{driver_id}/manifest",
    summary="Get the cargo manifest of a driver"
)
async def get_driver_manifest(
    driver_id: str,
    services: ServiceRegistry = Depends(get_service_registry)
):
    """
    In-transit shipments of the driver together with their orders.
    """
    manifest = await services.shipment.driver_manifest(driver_id)
    return APIResponse.success(data=manifest)

@shipment_router.get(
    "/carrier/{carrier_id}",
    summary="Get all shipments of a carrier"
)
async def get_carrier_shipments(
    carrier_id: str,
    services: ServiceRegistry = Depends(get_service_registry)
):
    shipments = await services.shipment.carrier_shipments(carrier_id)
    return APIResponse.success(data=shipments)

@shipment_router.get(
    "/{shipment_id}",
    summary="Get a single shipment with its orders"
)
async def get_shipment_by_id(
    shipment_id: str,
    services: ServiceRegistry = Depends(get_service_registry)
):
    shipment = await services.shipment.get_with_orders(shipment_id)
    return APIResponse.success(data=shipment)
