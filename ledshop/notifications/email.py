"""
ledshop/notifications/email.py
------------------------------
Outgoing email. There is no mail transport configured: messages are
written to the log so they can be checked during development.
"""
import logging

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str, text: str = None) -> None:
    logger.info(f"Email to {to!r}: {subject!r}")
    logger.debug(text or html)


def send_order_approval_email(user_email: str, user_name: str, order_id: int) -> None:
    subject = f'Order #{order_id} Approved - EFX LED Shop'
    html = (
        '<h2>Your Order Has Been Approved!</h2>'
        f'<p>Hi {user_name},</p>'
        f'<p>Great news! Your order #{order_id} has been approved and is now being processed.</p>'
        '<p>You can track your order status by logging into your account.</p>'
        '<p>Thank you for your business!</p>'
        '<p>Best regards,<br>The EFX LED Shop Team</p>'
    )
    send_email(user_email, subject, html,
               text=f'Your order #{order_id} has been approved and is now being processed.')
