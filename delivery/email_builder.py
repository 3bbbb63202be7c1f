"""Email builder for order notifications."""
import html
from dataclasses import dataclass
from typing import Optional

from storefront.models import Order

CURRENCY_SYMBOLS = {"gbp": "£", "usd": "$", "eur": "€"}


@dataclass
class EmailData:
    """Email data structure handed to the sender"""

    to_email: str
    from_email: str
    subject: str
    text_content: str
    html_content: Optional[str] = None
    reply_to_email: Optional[str] = None


def format_amount(amount_cents: int, currency: str) -> str:
    """Render minor units with the currency symbol, e.g. 18900 gbp -> £189.00"""
    symbol = CURRENCY_SYMBOLS.get(currency.lower())
    value = f"{amount_cents / 100:,.2f}"
    return f"{symbol}{value}" if symbol else f"{value} {currency.upper()}"


def build_order_confirmation_email(order: Order, sender: str, recipient: str) -> EmailData:
    """
    Build the seller notification for a newly confirmed order.

    Args:
        order: Confirmed order with its items loaded
        sender: Mailbox the message is sent from
        recipient: Seller address that receives order notifications

    Returns:
        EmailData with text and HTML bodies; replies go to the customer
    """
    lines = [
        f"{item.quantity} x {item.product_name} @ {format_amount(item.unit_price_cents, order.currency)}"
        for item in order.items
    ]
    total = format_amount(order.total_cents, order.currency)

    text_content = "\n".join(
        [
            f"Order {order.id} has been paid and confirmed.",
            "",
            f"Customer: {order.customer_email}",
            "",
            *lines,
            "",
            f"Total: {total}",
        ]
    )

    html_items = "".join(f"<li>{html.escape(line)}</li>" for line in lines)
    html_content = (
        f"<h2>Order confirmed</h2>"
        f"<p>Order <strong>{order.id}</strong> has been paid and confirmed.</p>"
        f"<p>Customer: {html.escape(order.customer_email)}</p>"
        f"<ul>{html_items}</ul>"
        f"<p><strong>Total: {total}</strong></p>"
    )

    return EmailData(
        to_email=recipient,
        from_email=sender,
        subject=f"New order confirmed: {total}",
        text_content=text_content,
        html_content=html_content,
        reply_to_email=order.customer_email,
    )
