from decimal import Decimal

from slot_settlement.domain.money import (
    format_eur,
    format_money,
    parse_money,
    quantize_money,
)


def test_quantize_money_uses_round_half_up() -> None:
    assert quantize_money(Decimal("3.805")) == Decimal("3.81")
    assert quantize_money(Decimal("3.804")) == Decimal("3.80")


def test_parse_money_returns_quantized_decimal() -> None:
    assert parse_money("7.6") == Decimal("7.60")


def test_format_money_has_two_decimal_places() -> None:
    assert format_money(Decimal("-3.8")) == "-3.80"


def test_format_eur_prefixes_currency_symbol() -> None:
    assert format_eur(Decimal("11.4")) == "€11.40"
