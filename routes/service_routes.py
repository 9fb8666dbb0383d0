from fastapi import APIRouter, Depends
from typing import List
from schemas.service import Service
from config.container import AppContainer, get_container

router = APIRouter(
    prefix="/services",
    tags=["services"]
)


@router.get("", response_model=List[Service])
async def get_all_services(container: AppContainer = Depends(get_container)):
    return await container.catalog.refresh()


@router.get("/{service_id}/recovery-tips")
async def get_recovery_tips(service_id: str, container: AppContainer = Depends(get_container)):
    service = container.catalog.get(service_id)
    service_name = service.name if service else service_id
    tips = await container.summarizer.get_recovery_tips(service_name)
    return {"service": service_id, "tips": tips}
