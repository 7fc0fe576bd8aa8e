"""Notification text for a newly detected order."""

from __future__ import annotations

import dataclasses

from orderwatch.models.order import OrderSummary


@dataclasses.dataclass(frozen=True)
class MessageLocale:
    """Locale-specific pieces of the notification text."""

    currency_symbol: str
    decimal_separator: str
    thousands_separator: str
    title_template: str
    price_to_negotiate: str


_LOCALES: dict[str, MessageLocale] = {
    "en": MessageLocale(
        currency_symbol="$",
        decimal_separator=".",
        thousands_separator=",",
        title_template="📦 New order available - {display_id}",
        price_to_negotiate="Price to negotiate",
    ),
    "es": MessageLocale(
        currency_symbol="$",
        decimal_separator=",",
        thousands_separator=".",
        title_template="📦 Nuevo pedido disponible - {display_id}",
        price_to_negotiate="Precio a acordar",
    ),
}

DEFAULT_LOCALE = "en"


def get_locale(name: str | None) -> MessageLocale:
    """Resolve ``"es"``, ``"es_AR"``, ``"es-MX"``... to a known locale; unknown names fall back to English."""
    if name:
        language = name.replace("-", "_").split("_", 1)[0].lower()
        locale = _LOCALES.get(language)
        if locale is not None:
            return locale
    return _LOCALES[DEFAULT_LOCALE]


def format_price(amount: float, locale: str | None = DEFAULT_LOCALE) -> str:
    """Format *amount* as currency, or the negotiate text when it is not positive."""
    loc = get_locale(locale)
    if amount <= 0:
        return loc.price_to_negotiate
    integer_part, decimal_part = f"{amount:,.2f}".split(".")
    integer_part = integer_part.replace(",", loc.thousands_separator)
    return f"{loc.currency_symbol}{integer_part}{loc.decimal_separator}{decimal_part}"


def format_order_message(order: OrderSummary, locale: str | None = DEFAULT_LOCALE) -> tuple[str, str]:
    """Return the ``(title, body)`` pair for *order*."""
    loc = get_locale(locale)
    title = loc.title_template.format(display_id=order.display_id)
    body = "\n".join(
        (
            f"{order.local_name} → {order.client_name}",
            order.delivery_address,
            format_price(order.suggested_price, locale),
        )
    )
    return title, body
