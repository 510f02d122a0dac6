"""Rendering of the order emails sent when a customer is not connected."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Iterable

from order_notifier.domain.entities import (
    ORDER_PREPARING,
    ORDER_READY,
    EmailBody,
    OrderItem,
)

BRAND_NAME = "Delicious Kitchen"
FOOTER = "Este es un email automático, por favor no respondas a este mensaje."


@dataclass(frozen=True)
class _EmailCopy:
    subject: str
    title: str
    headline_html: str
    headline_text: str
    closing_html: str
    closing_text: str
    include_review_link: bool


_COPY: dict[str, _EmailCopy] = {
    ORDER_READY: _EmailCopy(
        subject="🍽️ ¡Tu pedido está listo para recoger!",
        title="Pedido Listo",
        headline_html=(
            "¡Tenemos excelentes noticias! "
            '<strong style="color: #ff7e33;">Tu pedido está listo</strong> para recoger 🎉'
        ),
        headline_text="¡Tenemos excelentes noticias! Tu pedido está listo para recoger.",
        closing_html=(
            "Por favor pasa por nuestro restaurante cuando puedas. "
            "¡Tu comida te está esperando! 🥘"
        ),
        closing_text=(
            "Por favor pasa por nuestro restaurante cuando puedas. "
            "¡Tu comida te está esperando!"
        ),
        include_review_link=True,
    ),
    ORDER_PREPARING: _EmailCopy(
        subject="👨‍🍳 Tu pedido ya está en preparación",
        title="Pedido en Preparación",
        headline_html=(
            "Sabemos que tienes hambre 😋, queremos notificarte que "
            '<strong style="color: #ff7e33;">tu pedido ya está en preparación</strong>.'
        ),
        headline_text=(
            "Sabemos que tienes hambre y queremos notificarte que tu pedido "
            "ya está en preparación."
        ),
        closing_html="Nuestros chefs están trabajando en tu pedido. ¡Pronto estará listo! 👨‍🍳✨",
        closing_text="¡Pronto estará listo!",
        include_review_link=False,
    ),
}

EMAIL_EVENT_TYPES = frozenset(_COPY)


@dataclass(frozen=True)
class RenderedEmail:
    """Subject and bodies ready to be wrapped in a delivery request."""

    subject: str
    body: EmailBody


def order_url(frontend_url: str, order_reference: str) -> str:
    """Return the customer facing URL of ``order_reference``."""

    return f"{frontend_url.rstrip('/')}/orders/{order_reference}"


def render_order_email(
    event_type: str,
    *,
    order_reference: str,
    customer_name: str,
    items: Iterable[OrderItem],
    frontend_url: str,
) -> RenderedEmail:
    """Render the email announcing ``event_type`` for an order.

    Raises ``ValueError`` for event types that have no email.
    """

    copy = _COPY.get(event_type)
    if copy is None:
        raise ValueError(f"No email template for event type {event_type!r}")

    items = list(items)
    url = order_url(frontend_url, order_reference)
    return RenderedEmail(
        subject=copy.subject,
        body=EmailBody(
            html=_render_html(copy, customer_name, items, url),
            text=_render_text(copy, customer_name, items, url),
        ),
    )


def _render_text(
    copy: _EmailCopy, customer_name: str, items: list[OrderItem], url: str
) -> str:
    lines = [f"Hola {customer_name},", "", copy.headline_text, ""]
    if items:
        lines.append("Tu orden:")
        lines.extend(f"- {item.quantity}x {item.name}" for item in items)
        lines.append("")
    lines.extend(["Puedes ver el estado de tu pedido en:", url, ""])
    if copy.include_review_link:
        lines.extend(["También puedes dejar tu reseña aquí:", url, ""])
    lines.extend(
        [
            copy.closing_text,
            "",
            "Gracias por tu preferencia,",
            f"Equipo {BRAND_NAME}",
            "",
            "---",
            FOOTER,
        ]
    )
    return "\n".join(lines)


def _render_html(
    copy: _EmailCopy, customer_name: str, items: list[OrderItem], url: str
) -> str:
    items_html = "".join(
        '<li style="padding: 8px 0; border-bottom: 1px solid #f0f0f0;">'
        f'<span style="color: #333333; font-weight: 500;">{item.quantity}x</span> '
        f'<span style="color: #666666;">{escape(item.name)}</span></li>'
        for item in items
    )
    order_block = (
        '<div style="background-color: #fff5f0; border-left: 4px solid #ff7e33; '
        'padding: 20px; margin: 30px 0;">'
        '<p style="color: #333333; font-weight: bold;">Tu orden:</p>'
        f'<ul style="list-style: none; padding: 0; margin: 0;">{items_html}</ul></div>'
        if items
        else ""
    )
    safe_url = escape(url, quote=True)
    buttons = [
        f'<a href="{safe_url}" style="display: inline-block; background: #ff7e33; '
        "color: #ffffff; text-decoration: none; padding: 15px 40px; "
        'border-radius: 5px; font-weight: bold;">Ver estado del pedido</a>'
    ]
    if copy.include_review_link:
        buttons.append(
            f'<a href="{safe_url}" style="display: inline-block; color: #ff7e33; '
            "text-decoration: none; padding: 15px 40px; border-radius: 5px; "
            'font-weight: bold; border: 2px solid #ff7e33;">⭐ Dejar una reseña</a>'
        )
    buttons_html = "".join(
        f'<p style="text-align: center; padding: 10px 0;">{button}</p>'
        for button in buttons
    )

    return (
        "<!DOCTYPE html>"
        '<html><head><meta charset="UTF-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">'
        f"<title>{copy.title}</title></head>"
        '<body style="margin: 0; padding: 20px; font-family: Arial, sans-serif; '
        'background-color: #f4f4f4;">'
        '<div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; '
        'border-radius: 8px; overflow: hidden;">'
        '<div style="background: #ff5722; padding: 40px 20px; text-align: center;">'
        f'<h1 style="color: #ffffff; margin: 0;">🍽️ {BRAND_NAME}</h1></div>'
        '<div style="padding: 40px 30px;">'
        f'<h2 style="color: #333333;">¡Hola {escape(customer_name)}! 👋</h2>'
        f'<p style="color: #666666; font-size: 16px;">{copy.headline_html}</p>'
        f"{order_block}"
        f'<p style="color: #666666; font-size: 16px;">{copy.closing_html}</p>'
        f"{buttons_html}"
        '<p style="color: #999999; font-size: 14px;">Gracias por tu preferencia,<br>'
        f'<strong style="color: #ff7e33;">Equipo {BRAND_NAME}</strong></p></div>'
        '<div style="background-color: #f8f9fa; padding: 20px 30px; text-align: center;">'
        f'<p style="color: #999999; font-size: 12px; margin: 0;">{FOOTER}</p></div>'
        "</div></body></html>"
    )


__all__ = [
    "EMAIL_EVENT_TYPES",
    "RenderedEmail",
    "order_url",
    "render_order_email",
]
