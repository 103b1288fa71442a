"""In-app notification and admin audit helpers shared by the routers."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.models.notification import AdminAction, Notification

logger = logging.getLogger(__name__)


async def notify(
    db: AsyncSession,
    user_id: uuid.UUID,
    type_: str,
    content: str,
    booking_id: uuid.UUID | None = None,
    villa_id: uuid.UUID | None = None,
) -> Notification:
    """Queue a notification for ``user_id`` in the current transaction."""
    notification = Notification(
        user_id=user_id,
        type=type_,
        content=content,
        related_booking_id=booking_id,
        related_villa_id=villa_id,
    )
    db.add(notification)
    await db.flush()
    logger.debug("Notification [%s] for user %s", type_, user_id)
    return notification


async def log_admin_action(
    db: AsyncSession,
    admin_id: uuid.UUID,
    action_type: str,
    target_type: str,
    target_id: uuid.UUID | str,
    notes: str | None = None,
) -> AdminAction:
    """Record an admin moderation action in the audit trail."""
    action = AdminAction(
        admin_id=admin_id,
        action_type=action_type,
        target_type=target_type,
        target_id=str(target_id),
        notes=notes,
    )
    db.add(action)
    await db.flush()
    logger.info("Admin %s: %s %s %s", admin_id, action_type, target_type, target_id)
    return action
