"""
Storefront Backend — Email Service
====================================

What:  Composes and sends the order confirmation (to the customer) and the
       new-order alert (to the store admin).
How:   Builds `email.message.EmailMessage` objects and hands them to
       aiosmtplib. With SMTP_HOST unset, delivery is disabled: messages are
       logged at INFO and dropped.
Who:   OrderService, after the order has been committed.

Failure contract:
    send() wraps every transport/SMTP failure in EmailDeliveryError.
    The caller decides whether that is fatal (for orders it never is).
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from email.message import EmailMessage
from typing import Any, Dict, List

import aiosmtplib

from storefront.config import Settings
from storefront.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


@dataclass
class OrderEmailLine:
    name: str
    quantity: int
    price: Decimal


@dataclass
class OrderEmailData:
    """Everything either order email needs, detached from the ORM session."""

    order_id: str
    email: str
    phone: str
    total: Decimal
    items: List[OrderEmailLine] = field(default_factory=list)
    shipping_address: Dict[str, Any] = field(default_factory=dict)


def format_money(amount: Decimal) -> str:
    return f"${Decimal(amount):,.2f}"


def render_order_summary(data: OrderEmailData) -> str:
    """Plain-text block shared by both order emails."""
    lines = [f"Order ID: {data.order_id}", ""]
    for item in data.items:
        line_total = Decimal(item.price) * item.quantity
        lines.append(
            f"  {item.name} x {item.quantity} @ {format_money(item.price)} = {format_money(line_total)}"
        )
    lines.append("")
    lines.append(f"Total: {format_money(data.total)}")
    address = data.shipping_address or {}
    lines.append("")
    lines.append("Ship to:")
    lines.append(f"  {address.get('street', '')}")
    lines.append(f"  {address.get('city', '')}, {address.get('state', '')} {address.get('zip', '')}")
    lines.append(f"Phone: {data.phone}")
    return "\n".join(lines)


class EmailService:
    """SMTP-backed sender configured from Settings."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def enabled(self) -> bool:
        return bool(self.settings.smtp_host)

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.email_from
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    async def send(self, message: EmailMessage) -> None:
        """
        Deliver one message.

        Raises:
            EmailDeliveryError: connection, auth, or recipient rejection.
        """
        if not self.enabled:
            logger.info(
                "SMTP not configured; dropping email to %s (%s)",
                message["To"],
                message["Subject"],
            )
            return

        try:
            await aiosmtplib.send(
                message,
                hostname=self.settings.smtp_host,
                port=self.settings.smtp_port,
                username=self.settings.smtp_username or None,
                password=self.settings.smtp_password or None,
                use_tls=self.settings.smtp_use_tls,
                start_tls=self.settings.smtp_start_tls and not self.settings.smtp_use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(
                context={"to": message["To"], "subject": message["Subject"], "error": str(e)},
            ) from e

        logger.info("Email sent to %s (%s)", message["To"], message["Subject"])

    async def send_order_confirmation(self, data: OrderEmailData) -> None:
        subject = f"{self.settings.store_name}: order confirmation {data.order_id}"
        body = (
            f"Thank you for your order!\n\n"
            f"{render_order_summary(data)}\n\n"
            f"We will let you know when it ships."
        )
        await self.send(self.build_message(data.email, subject, body))

    async def send_admin_order_alert(self, data: OrderEmailData) -> None:
        """Alert the store admin; skipped when ADMIN_NOTIFY_EMAIL is unset."""
        if not self.settings.admin_notify_email:
            logger.info("ADMIN_NOTIFY_EMAIL not set; skipping admin alert for %s", data.order_id)
            return
        subject = f"New order {data.order_id} ({format_money(data.total)})"
        body = f"A new order was placed by {data.email}.\n\n{render_order_summary(data)}"
        await self.send(self.build_message(self.settings.admin_notify_email, subject, body))
