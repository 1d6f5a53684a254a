"""
Work item API routes, nested under a workspace project.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from strideboard.core.database import get_db_session
from strideboard.modules.auth.dependencies import get_current_user
from strideboard.modules.auth.models import User
from strideboard.modules.work_item.events import WorkItemEventPublisher, get_event_publisher
from strideboard.modules.work_item.schemas import (
    WorkItemCreate,
    WorkItemMove,
    WorkItemResponse,
    WorkItemUpdate,
)
from strideboard.modules.work_item.service import WorkItemService

router = APIRouter()


def get_work_item_service(
    session: AsyncSession = Depends(get_db_session),
    publisher: WorkItemEventPublisher = Depends(get_event_publisher)
) -> WorkItemService:
    return WorkItemService(session, publisher=publisher)


@router.get("", response_model=List[WorkItemResponse])
async def list_work_items(
    workspace_id: UUID,
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    service: WorkItemService = Depends(get_work_item_service)
):
    """List work items in board order."""
    items = await service.list_work_items(workspace_id, project_id, current_user)
    return [WorkItemResponse.model_validate(item) for item in items]


@router.post("", response_model=WorkItemResponse, status_code=status.HTTP_201_CREATED)
async def create_work_item(
    workspace_id: UUID,
    project_id: UUID,
    work_item_data: WorkItemCreate,
    current_user: User = Depends(get_current_user),
    service: WorkItemService = Depends(get_work_item_service)
):
    """Create a work item at the end of the board (admins and members)."""
    item = await service.create_work_item(workspace_id, project_id, work_item_data, current_user)
    return WorkItemResponse.model_validate(item)


@router.get("/{work_item_id}", response_model=WorkItemResponse)
async def get_work_item(
    workspace_id: UUID,
    project_id: UUID,
    work_item_id: UUID,
    current_user: User = Depends(get_current_user),
    service: WorkItemService = Depends(get_work_item_service)
):
    item = await service.get_work_item(workspace_id, project_id, work_item_id, current_user)
    return WorkItemResponse.model_validate(item)


@router.patch("/{work_item_id}", response_model=WorkItemResponse)
async def update_work_item(
    workspace_id: UUID,
    project_id: UUID,
    work_item_id: UUID,
    work_item_data: WorkItemUpdate,
    current_user: User = Depends(get_current_user),
    service: WorkItemService = Depends(get_work_item_service)
):
    item = await service.update_work_item(
        workspace_id, project_id, work_item_id, work_item_data, current_user
    )
    return WorkItemResponse.model_validate(item)


@router.post("/{work_item_id}/move", response_model=WorkItemResponse)
async def move_work_item(
    workspace_id: UUID,
    project_id: UUID,
    work_item_id: UUID,
    move: WorkItemMove,
    current_user: User = Depends(get_current_user),
    service: WorkItemService = Depends(get_work_item_service)
):
    """Drag-and-drop placement between two neighbours."""
    item = await service.move_work_item(workspace_id, project_id, work_item_id, move, current_user)
    return WorkItemResponse.model_validate(item)


@router.delete("/{work_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_work_item(
    workspace_id: UUID,
    project_id: UUID,
    work_item_id: UUID,
    current_user: User = Depends(get_current_user),
    service: WorkItemService = Depends(get_work_item_service)
):
    await service.delete_work_item(workspace_id, project_id, work_item_id, current_user)
