from fastapi import APIRouter, Depends

from shipflow.dependencies import get_service_registry
from shipflow.responses import APIResponse
from shipflow.services import ServiceRegistry

carrier_router = APIRouter()

@carrier_router.get(
    "",
    summary="Get a list of carriers"
)
async def get_all_carriers(
    services: ServiceRegistry = Depends(get_service_registry)
):
    carriers = await services.directory.list_carriers()
    return APIResponse.success(data=carriers)

@carrier_router.get(
    "/{carrier_id}/drivers",
    summary="Get the drivers of a carrier"
)
async def get_carrier_drivers(
    carrier_id: str,
    services: ServiceRegistry = Depends(get_service_registry)
):
    drivers = await services.directory.list_drivers(carrier_id)
    return APIResponse.success(data=drivers)
