from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, col, select

from app.core.errors import NotFoundError
from app.core.security import get_current_barber_profile, get_current_user
from app.database import get_session
from app.models.barber import Barber
from app.models.notification import AdminNotification, BarberNotification, UserNotification
from app.models.user import User, UserRole

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _owner_filter(user: User, barber: Optional[Barber]):
    """(tabela, condição de dono) conforme o papel de quem pede."""
    if user.role == UserRole.CLIENT:
        return UserNotification, UserNotification.user_id == user.id

    if user.role == UserRole.BARBER:
        return BarberNotification, BarberNotification.barber_id == barber.id

    if user.role == UserRole.ADMIN:
        return AdminNotification, AdminNotification.admin_user_id == user.id

    raise HTTPException(status_code=403, detail="Permission denied")


def _get_owned(session: Session, model, owned, notification_id: int):
    notification = session.exec(
        select(model).where(model.id == notification_id, owned)
    ).first()
    if notification is None:
        raise NotFoundError("Notification not found.")
    return notification


@router.get("/")
def list_notifications(
    unread_only: bool = False,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    barber: Optional[Barber] = Depends(get_current_barber_profile),
):
    model, owned = _owner_filter(current_user, barber)

    query = select(model).where(owned)
    if unread_only:
        query = query.where(model.is_read == False)  # noqa: E712

    return session.exec(query.order_by(col(model.created_at).desc())).all()


@router.patch("/read-all")
def mark_all_notifications_read(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    barber: Optional[Barber] = Depends(get_current_barber_profile),
):
    model, owned = _owner_filter(current_user, barber)

    unread = session.exec(
        select(model).where(owned, model.is_read == False)  # noqa: E712
    ).all()
    for notification in unread:
        notification.is_read = True
        session.add(notification)
    session.commit()

    return {"updated": len(unread)}


@router.patch("/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    barber: Optional[Barber] = Depends(get_current_barber_profile),
):
    model, owned = _owner_filter(current_user, barber)
    notification = _get_owned(session, model, owned, notification_id)

    notification.is_read = True
    session.add(notification)
    session.commit()
    session.refresh(notification)
    return notification


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    barber: Optional[Barber] = Depends(get_current_barber_profile),
):
    model, owned = _owner_filter(current_user, barber)
    notification = _get_owned(session, model, owned, notification_id)

    session.delete(notification)
    session.commit()
    return {"message": "Notification deleted"}
