"""
===============================================================================
TARJETA CRC — domain/currency.py (Conversión y formato de moneda)
===============================================================================

Responsabilidades:
  - Convertir montos entre USD e INR con tasa fija.
  - Formatear montos para mostrar (USD estilo en-US, INR con agrupación india).

Colaboradores:
  - application/csv_export.py: convierte el campo monetario al exportar.

Reglas:
  - Tasa fija: 1 USD = 83 INR.
  - Pares desconocidos o iguales: identidad (no falla).
===============================================================================
"""

from __future__ import annotations

from typing import Optional, Union

from .records import Currency

USD_TO_INR = 83

CurrencyLike = Union[Currency, str]


def _code(currency: Optional[CurrencyLike]) -> str:
    if currency is None:
        return Currency.USD.value
    return currency.value if isinstance(currency, Currency) else str(currency)


def convert(amount: float, from_: CurrencyLike, to: CurrencyLike) -> float:
    src, dst = _code(from_), _code(to)
    if src == dst:
        return amount
    if src == Currency.USD.value and dst == Currency.INR.value:
        return amount * USD_TO_INR
    if src == Currency.INR.value and dst == Currency.USD.value:
        return amount / USD_TO_INR
    return amount


def _group_indian(integer_part: str) -> str:
    """R: 1234567 -> 12,34,567 (últimos 3 dígitos, luego de a 2)."""
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(value: float, currency: CurrencyLike = Currency.USD) -> str:
    code = _code(currency)
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return f"{value} {code}"

    sign = "-" if amount < 0 else ""
    if code == Currency.USD.value:
        return f"{sign}${abs(amount):,.2f}"
    if code == Currency.INR.value:
        integer_part, decimals = f"{abs(amount):.2f}".split(".")
        return f"{sign}₹{_group_indian(integer_part)}.{decimals}"
    return f"{value} {code}"
