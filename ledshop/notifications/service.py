"""
ledshop/notifications/service.py
--------------------------------
Order status notifications. Callers treat these as best-effort: the status
change is already committed when they run.
"""
from ledshop import db
from ledshop.notifications.models import Notification
from ledshop.notifications.email import send_order_approval_email

_STATUS_MESSAGES = {
    'approved':  ('Order Approved',   'Your order #{id} has been approved and is being processed.'),
    'rejected':  ('Order Rejected',   'Your order #{id} has been rejected. Please contact us for details.'),
    'picked_up': ('Order Picked Up',  'Your order #{id} has been marked as picked up. Thank you!'),
}
_DEFAULT_MESSAGE = ('Order Updated', 'Your order #{id} status has been updated.')


def notify_order_status(order) -> Notification:
    """Insert and commit the in-app notification for the order's new status."""
    title, template = _STATUS_MESSAGES.get(order.status, _DEFAULT_MESSAGE)
    notification = Notification(
        user_id=order.user_id,
        type='order_status',
        title=title,
        message=template.format(id=order.id),
        reference_id=order.id,
        reference_type='order',
    )
    db.session.add(notification)
    db.session.commit()
    return notification


def email_order_status(order) -> None:
    """Only approvals are emailed."""
    if order.status != 'approved' or order.user is None:
        return
    user = order.user
    send_order_approval_email(user.email, user.name or user.email, order.id)
