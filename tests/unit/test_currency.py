from src.rk_common.currency import (
    CURRENCIES,
    currency_for_denom,
    denom_for_symbol,
    resolve_currency,
)


class TestRegistry:
    def test_kava(self) -> None:
        currency = currency_for_denom("ukava")
        assert currency is not None
        assert currency.symbol == "KAVA"
        assert currency.decimals == 6

    def test_unknown_denom(self) -> None:
        assert currency_for_denom("uatom") is None

    def test_bijection(self) -> None:
        for denom, currency in CURRENCIES.items():
            assert denom_for_symbol(currency.symbol) == denom


class TestResolveCurrency:
    def test_exact_match(self) -> None:
        assert resolve_currency("HARD", 6) == "hard"

    def test_wrong_decimals(self) -> None:
        assert resolve_currency("KAVA", 8) is None

    def test_unknown_symbol(self) -> None:
        assert resolve_currency("ATOM", 6) is None
