"""
Customer notifications as plain-text email.

Messages go out over SMTP when SMTP_HOST is configured; otherwise they are
only logged, which is what development and the test-suite run with. Sending
never raises: a notification failure must not fail the order it belongs to.
"""
import logging
import os
import smtplib
from email.mime.text import MIMEText
from typing import Optional

from dotenv import load_dotenv

from utils.formatting import format_currency

load_dotenv()

logger = logging.getLogger(__name__)

BAKERY_NAME = os.getenv("BAKERY_NAME", "Dorety Bakery")
EMAIL_FROM = os.getenv("EMAIL_FROM", "no-reply@doretybakery.com")

STATUS_MESSAGES = {
    "CONFIRMED": "Your order has been confirmed and will be prepared soon.",
    "PREPARING": "Our bakers are preparing your order.",
    "READY": "Your order is ready.",
    "OUT_FOR_DELIVERY": "Your order is on its way.",
    "DELIVERED": "Your order has been delivered. Enjoy!",
    "PICKED_UP": "Thank you for picking up your order. Enjoy!",
    "CANCELLED": "Your order has been cancelled.",
    "REFUNDED": "Your order has been refunded.",
}


def _smtp_settings() -> dict:
    return {
        "host": os.getenv("SMTP_HOST"),
        "port": int(os.getenv("SMTP_PORT", "587")),
        "user": os.getenv("SMTP_USER"),
        "password": os.getenv("SMTP_PASSWORD"),
    }


def send_email(to: str, subject: str, body: str) -> bool:
    """Returns True when the message was sent (or logged with SMTP disabled)."""
    smtp = _smtp_settings()
    if not smtp["host"]:
        logger.info(f"Email disabled - would send '{subject}' to {to}")
        return True

    message = MIMEText(body)
    message["Subject"] = subject
    message["From"] = EMAIL_FROM
    message["To"] = to
    try:
        with smtplib.SMTP(smtp["host"], smtp["port"], timeout=10) as server:
            server.starttls()
            if smtp["user"] and smtp["password"]:
                server.login(smtp["user"], smtp["password"])
            server.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        logger.warning(f"Failed to send '{subject}' to {to}: {e}")
        return False
    logger.info(f"Sent '{subject}' to {to}")
    return True


def _address_line(snapshot: Optional[dict]) -> str:
    if not snapshot:
        return ""
    parts = [snapshot.get("line1"), snapshot.get("line2"), snapshot.get("city"), snapshot.get("area")]
    return ", ".join(p for p in parts if p)


def send_order_confirmation(order, customer) -> bool:
    lines = [
        f"Hi {customer.name or 'Valued Customer'},",
        "",
        f"Thank you for your order {order.order_number}!",
        "",
    ]
    for item in order.items:
        lines.append(f"  {item.quantity} x {item.name_snapshot}  {format_currency(item.line_total)}")
    lines.append("")
    lines.append(f"Subtotal: {format_currency(order.sub_total)}")
    lines.append(f"Delivery: {format_currency(order.delivery_fee)}")
    lines.append(f"Total (cash on delivery): {format_currency(order.total)}")
    if order.fulfillment_type.value == "DELIVERY":
        lines.append(f"Delivering to: {_address_line(order.delivery_address_snapshot)}")
    else:
        lines.append("Pickup from the bakery")
    if order.requested_delivery_time:
        lines.append(f"Requested time: {order.requested_delivery_time:%A, %d %B %Y %H:%M}")
    lines.extend(["", BAKERY_NAME])
    return send_email(customer.email, f"Order Confirmation - {order.order_number}", "\n".join(lines))


def send_status_update(order, customer) -> bool:
    status = order.status.value
    message = STATUS_MESSAGES.get(status, f"Your order status is now {status}.")
    body = "\n".join([
        f"Hi {customer.name or 'Valued Customer'},",
        "",
        f"Order {order.order_number}: {message}",
        "",
        BAKERY_NAME,
    ])
    return send_email(customer.email, f"Order Update - {order.order_number}", body)


def send_welcome_email(user) -> bool:
    body = "\n".join([
        f"Hi {user.name or 'there'},",
        "",
        f"Welcome to {BAKERY_NAME}! Your account is ready.",
        "",
        BAKERY_NAME,
    ])
    return send_email(user.email, f"Welcome to {BAKERY_NAME}!", body)


def send_test_email(to: str, subject: Optional[str] = None) -> bool:
    return send_email(to, subject or f"{BAKERY_NAME} test email",
                      f"This is a test email from {BAKERY_NAME}. If you received it, email is working.")
