"""
Storefront Backend — Email Service Tests
==========================================

What we test:
    ✅ Disabled SMTP (empty host) is a logged no-op
    ✅ Confirmation goes to the customer, alert to ADMIN_NOTIFY_EMAIL
    ✅ Alert skipped when ADMIN_NOTIFY_EMAIL is unset
    ✅ Transport failures surface as EmailDeliveryError
    ✅ Order summary lists lines, total and address
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from storefront.config import Settings
from storefront.exceptions import EmailDeliveryError
from storefront.services.email_service import (
    EmailService,
    OrderEmailData,
    OrderEmailLine,
    render_order_summary,
)


def order_data() -> OrderEmailData:
    return OrderEmailData(
        order_id="ord-1",
        email="buyer@example.com",
        phone="555-0100",
        total=Decimal("59.00"),
        items=[OrderEmailLine(name="Linen Shirt - XL", quantity=2, price=Decimal("29.50"))],
        shipping_address={"street": "1 Main St", "city": "Springfield", "state": "IL", "zip": "62701"},
    )


def smtp_settings(**overrides) -> Settings:
    values = {"smtp_host": "smtp.example.com", "admin_notify_email": "owner@example.com"}
    values.update(overrides)
    return Settings(**values)


class TestRendering:
    def test_summary_contents(self):
        summary = render_order_summary(order_data())

        assert "Order ID: ord-1" in summary
        assert "Linen Shirt - XL x 2 @ $29.50 = $59.00" in summary
        assert "Total: $59.00" in summary
        assert "Springfield, IL 62701" in summary


class TestSending:
    @pytest.mark.asyncio
    async def test_disabled_smtp_sends_nothing(self):
        service = EmailService(smtp_settings(smtp_host=""))

        with patch("storefront.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
            await service.send_order_confirmation(order_data())

        assert not service.enabled
        send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_confirmation_and_alert_recipients(self):
        service = EmailService(smtp_settings())

        with patch("storefront.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
            await service.send_order_confirmation(order_data())
            await service.send_admin_order_alert(order_data())

        recipients = [call.args[0]["To"] for call in send.await_args_list]
        assert recipients == ["buyer@example.com", "owner@example.com"]
        assert send.await_args_list[0].kwargs["hostname"] == "smtp.example.com"

    @pytest.mark.asyncio
    async def test_alert_skipped_without_admin_address(self):
        service = EmailService(smtp_settings(admin_notify_email=""))

        with patch("storefront.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
            await service.send_admin_order_alert(order_data())

        send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_failure_wrapped(self):
        service = EmailService(smtp_settings())
        failure = AsyncMock(side_effect=aiosmtplib.SMTPConnectError("connection refused"))

        with patch("storefront.services.email_service.aiosmtplib.send", new=failure):
            with pytest.raises(EmailDeliveryError):
                await service.send_order_confirmation(order_data())
