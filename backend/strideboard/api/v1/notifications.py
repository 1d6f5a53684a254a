"""
Notification inbox API routes.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from strideboard.core.database import get_db_session
from strideboard.modules.auth.dependencies import get_current_user
from strideboard.modules.auth.models import User
from strideboard.modules.notification.schemas import InboxItem, UnreadStatus
from strideboard.modules.notification.service import NotificationService

router = APIRouter()


@router.get("", response_model=List[InboxItem])
async def list_notifications(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """The caller's notifications, newest first."""
    return await NotificationService(session).list_inbox(current_user)


@router.get("/has-unread", response_model=UnreadStatus)
async def has_unread(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    return UnreadStatus(has_unread=await NotificationService(session).has_unread(current_user))


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    await NotificationService(session).mark_read(notification_id, current_user)


@router.post("/{notification_id}/accept", status_code=status.HTTP_204_NO_CONTENT)
async def accept_invite(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Join the workspace the invite is for."""
    await NotificationService(session).accept_invite(notification_id, current_user)


@router.delete("/{notification_id}/reject", status_code=status.HTTP_204_NO_CONTENT)
async def reject_invite(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    await NotificationService(session).reject_invite(notification_id, current_user)
