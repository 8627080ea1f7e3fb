"""Notification message formatting."""

import html
import re
from decimal import Decimal
from typing import Optional

from bs4 import BeautifulSoup


def format_inr(amount: Decimal) -> str:
    """Format an amount with the rupee sign and thousands separators."""
    if amount == amount.to_integral_value():
        return f"₹{amount:,.0f}"
    return f"₹{amount:,.2f}"


def build_price_drop_subject(product_name: str) -> str:
    return f"Price Drop Alert: {product_name}"


def build_price_drop_body(
    user_name: str,
    product_name: str,
    product_url: str,
    new_price: Decimal,
    target_price: Decimal,
    old_price: Optional[Decimal] = None,
    image_url: Optional[str] = None,
) -> str:
    """HTML body for a price-drop email.

    The savings block is only shown when the previous price is known and
    higher than the new one.
    """
    name = html.escape(product_name)
    greeting = f"Great news, {html.escape(user_name)}!" if user_name else "Great news!"

    image_html = ""
    if image_url:
        image_html = (
            f'<img src="{html.escape(image_url, quote=True)}" alt="{name}" '
            'style="width: 100%; max-width: 300px; height: auto; border-radius: 8px; margin: 10px auto; display: block;">'
        )

    price_lines = []
    if old_price and old_price > new_price:
        savings = old_price - new_price
        discount = round((savings / old_price) * 100)
        price_lines.append(
            f'<p style="margin: 5px 0;"><strong>Old Price:</strong> '
            f'<span style="text-decoration: line-through;">{format_inr(old_price)}</span></p>'
        )
        price_lines.append(
            f'<p style="margin: 5px 0;"><strong>New Price:</strong> '
            f'<span style="color: #13ec5b; font-size: 24px; font-weight: bold;">{format_inr(new_price)}</span></p>'
        )
        price_lines.append(
            f'<p style="margin: 5px 0;"><strong>You Save:</strong> {format_inr(savings)} ({discount}% OFF)</p>'
        )
    else:
        price_lines.append(
            f'<p style="margin: 5px 0;"><strong>Current Price:</strong> '
            f'<span style="color: #13ec5b; font-size: 24px; font-weight: bold;">{format_inr(new_price)}</span></p>'
        )
    price_lines.append(
        f'<p style="margin: 5px 0;"><strong>Your Target:</strong> {format_inr(target_price)}</p>'
    )

    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
        '<h2 style="color: #13ec5b;">Price Drop Alert!</h2>'
        f"<p>{greeting}</p>"
        f"<p>The price of <strong>{name}</strong> has dropped to your target.</p>"
        f"{image_html}"
        '<div style="background: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        f"{''.join(price_lines)}"
        "</div>"
        f'<a href="{html.escape(product_url, quote=True)}" style="display: inline-block; background: #13ec5b; '
        'color: #102216; padding: 12px 24px; text-decoration: none; border-radius: 6px; font-weight: bold;">'
        "Buy Now</a>"
        '<p style="margin-top: 30px; color: #666; font-size: 12px;">'
        "You're receiving this because you set a price alert on PriceWatch."
        "</p>"
        "</div>"
    )


def html_to_text(body: str) -> str:
    """Plain-text alternative for an HTML body."""
    text = BeautifulSoup(body, "html.parser").get_text("\n", strip=True)
    return re.sub(r"\n{3,}", "\n\n", text)
