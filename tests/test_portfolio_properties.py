"""Property-based tests for the holdings ledger.

Tests the weighted average cost accounting and ledger invariants using Hypothesis.
"""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import List, Tuple

import pytest
from hypothesis import given, settings, strategies as st

from portfolio_tracker.data.providers import MockPriceSource
from portfolio_tracker.trading.errors import (
    InsufficientHoldingsError,
    InvalidPriceError,
    InvalidQuantityError,
)
from portfolio_tracker.trading.models import Asset, OrderType, Transaction
from portfolio_tracker.trading.orders import TradingService
from portfolio_tracker.trading.portfolio import PortfolioLedger


# Strategies for generating valid test data
positive_quantity_strategy = st.integers(min_value=1, max_value=1000)

positive_price_strategy = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("100000"),
    places=2,
    allow_nan=False,
    allow_infinity=False
)

symbol_strategy = st.sampled_from(["AAPL", "MSFT", "TSLA", "BTC", "ETH"])

buy_list_strategy = st.lists(
    st.tuples(positive_quantity_strategy, positive_price_strategy),
    min_size=1,
    max_size=15,
)


def _prices() -> MockPriceSource:
    return MockPriceSource(jitter=0)


def _txn(asset: Asset, order_type: OrderType, quantity: int, price: Decimal) -> Transaction:
    return Transaction(asset=asset, order_type=order_type, quantity=quantity, price=price)


def _weighted_mean(buys: List[Tuple[int, Decimal]]) -> Decimal:
    total_qty = sum(q for q, _ in buys)
    return sum((q * p for q, p in buys), Decimal("0")) / total_qty


@given(buys=buy_list_strategy)
@settings(max_examples=100)
def test_average_cost_is_weighted_mean_of_buys(buys: List[Tuple[int, Decimal]]):
    """
    For any sequence of buys on one symbol, the average cost SHALL equal
    sum(qty_i x price_i) / sum(qty_i), and quantity SHALL equal sum(qty_i).
    """
    ledger = PortfolioLedger()
    asset = Asset.stock("AAPL", "Apple Inc.", _prices())

    for quantity, price in buys:
        ledger.record_transaction(_txn(asset, OrderType.BUY, quantity, price))

    held = ledger.get_asset("AAPL")
    assert held is not None
    assert held.quantity == sum(q for q, _ in buys)
    assert abs(held.average_cost - _weighted_mean(buys)) < Decimal("0.000001")


@given(buys=buy_list_strategy, data=st.data())
@settings(max_examples=50)
def test_average_cost_independent_of_buy_order(buys, data):
    """Reordering the same buys SHALL give the same average cost."""
    shuffled = data.draw(st.permutations(buys))
    asset = Asset.stock("AAPL", "Apple Inc.", _prices())

    first, second = PortfolioLedger(), PortfolioLedger()
    for quantity, price in buys:
        first.record_transaction(_txn(asset, OrderType.BUY, quantity, price))
    for quantity, price in shuffled:
        second.record_transaction(_txn(asset, OrderType.BUY, quantity, price))

    diff = first.get_asset("AAPL").average_cost - second.get_asset("AAPL").average_cost
    assert abs(diff) < Decimal("0.000001")


@given(
    buy_quantity=positive_quantity_strategy,
    buy_price=positive_price_strategy,
    sell_price=positive_price_strategy,
    data=st.data(),
)
@settings(max_examples=100)
def test_sell_keeps_average_cost(buy_quantity, buy_price, sell_price, data):
    """A sell SHALL reduce quantity by the sold amount and leave average cost untouched."""
    sell_quantity = data.draw(st.integers(min_value=1, max_value=buy_quantity))
    ledger = PortfolioLedger()
    asset = Asset.crypto("BTC", "Bitcoin", _prices())

    ledger.record_transaction(_txn(asset, OrderType.BUY, buy_quantity, buy_price))
    before = ledger.get_asset("BTC")
    ledger.record_transaction(_txn(asset, OrderType.SELL, sell_quantity, sell_price))
    after = ledger.get_asset("BTC")

    assert after.quantity == before.quantity - sell_quantity
    assert after.average_cost == before.average_cost


@given(
    buy_quantity=positive_quantity_strategy,
    extra=st.integers(min_value=1, max_value=100),
    price=positive_price_strategy,
)
@settings(max_examples=100)
def test_oversell_rejected_without_side_effects(buy_quantity, extra, price):
    """
    Selling more than is held SHALL raise InsufficientHoldingsError and leave
    quantity, average cost and the transaction log unchanged.
    """
    ledger = PortfolioLedger()
    asset = Asset.stock("MSFT", "Microsoft Corporation", _prices())
    ledger.record_transaction(_txn(asset, OrderType.BUY, buy_quantity, price))
    before = ledger.get_asset("MSFT")
    log_before = ledger.get_transactions()

    with pytest.raises(InsufficientHoldingsError):
        ledger.record_transaction(_txn(asset, OrderType.SELL, buy_quantity + extra, price))

    after = ledger.get_asset("MSFT")
    assert after.quantity == before.quantity
    assert after.average_cost == before.average_cost
    assert ledger.get_transactions() == log_before


@given(
    positions=st.dictionaries(
        keys=symbol_strategy,
        values=st.tuples(positive_quantity_strategy, positive_price_strategy, positive_price_strategy),
        max_size=5,
    )
)
@settings(max_examples=100)
def test_total_value_is_sum_of_quantity_times_price(positions):
    """Total value SHALL equal the sum of quantity x current price over holdings."""
    prices = MockPriceSource(base_prices={}, jitter=0)
    ledger = PortfolioLedger()
    expected = Decimal("0")
    for symbol, (quantity, cost, market) in positions.items():
        prices.set_base_price(symbol, market)
        asset = Asset.stock(symbol, symbol, prices)
        ledger.record_transaction(_txn(asset, OrderType.BUY, quantity, cost))
        expected += quantity * market

    assert ledger.get_total_value() == expected


def test_empty_ledger_has_zero_value():
    ledger = PortfolioLedger()

    assert ledger.get_total_value() == Decimal("0")
    assert ledger.get_asset_count() == 0
    assert ledger.get_transaction_count() == 0
    assert ledger.get_asset("AAPL") is None


def test_reads_are_idempotent_and_defensive(ledger, stock):
    ledger.record_transaction(_txn(stock, OrderType.BUY, 10, Decimal("100")))

    assert ledger.get_holdings() == ledger.get_holdings()
    assert ledger.get_transactions() == ledger.get_transactions()

    holdings = ledger.get_holdings()
    holdings["TEST"].quantity = 999
    holdings.pop("TEST")
    ledger.get_transactions().clear()

    assert ledger.get_asset("TEST").quantity == 10
    assert ledger.get_transaction_count() == 1


def test_caller_asset_is_not_shared_with_ledger(ledger, stock):
    ledger.record_transaction(_txn(stock, OrderType.BUY, 10, Decimal("100")))
    stock.quantity = 500
    stock.average_cost = Decimal("1")

    held = ledger.get_asset("TEST")
    assert held.quantity == 10
    assert held.average_cost == Decimal("100")


def test_scenario_a_two_buys(ledger, stock):
    ledger.record_transaction(_txn(stock, OrderType.BUY, 10, Decimal("100")))
    ledger.record_transaction(_txn(stock, OrderType.BUY, 5, Decimal("110")))

    held = ledger.get_asset("TEST")
    assert held.quantity == 15
    assert abs(held.average_cost - Decimal("103.33")) < Decimal("0.01")


def test_scenario_c_total_value():
    prices = MockPriceSource(
        base_prices={"TEST": Decimal("123.45"), "CRYPTO": Decimal("987.65")},
        jitter=0,
    )
    ledger = PortfolioLedger()
    ledger.record_transaction(
        _txn(Asset.stock("TEST", "Test Stock", prices), OrderType.BUY, 5, Decimal("100"))
    )
    ledger.record_transaction(
        _txn(Asset.crypto("CRYPTO", "Test Crypto", prices), OrderType.BUY, 1, Decimal("1000"))
    )

    assert ledger.get_total_value() == Decimal("1605.90")


def test_sell_records_cost_basis(ledger, stock):
    ledger.record_transaction(_txn(stock, OrderType.BUY, 10, Decimal("100")))
    sold = ledger.record_transaction(_txn(stock, OrderType.SELL, 4, Decimal("120")))

    assert sold.cost_basis == Decimal("100")
    assert ledger.get_transactions()[-1].cost_basis == Decimal("100")


def test_asset_stays_at_zero_quantity(ledger, stock):
    ledger.record_transaction(_txn(stock, OrderType.BUY, 3, Decimal("100")))
    ledger.record_transaction(_txn(stock, OrderType.SELL, 3, Decimal("90")))

    held = ledger.get_asset("TEST")
    assert held is not None
    assert held.quantity == 0
    assert ledger.get_asset_count() == 1


def test_sell_of_unknown_symbol_rejected(ledger, stock):
    with pytest.raises(InsufficientHoldingsError):
        ledger.record_transaction(_txn(stock, OrderType.SELL, 1, Decimal("100")))
    assert ledger.get_asset_count() == 0
    assert ledger.get_transaction_count() == 0


def test_reset_clears_holdings_and_log(ledger, stock):
    ledger.record_transaction(_txn(stock, OrderType.BUY, 3, Decimal("100")))
    ledger.reset()

    assert ledger.get_holdings() == {}
    assert ledger.get_transactions() == []


@pytest.mark.parametrize("quantity", [2.5, 2.0, True, "3"])
def test_non_integer_quantity_rejected_without_side_effects(ledger, stock, quantity):
    ledger.record_transaction(_txn(stock, OrderType.BUY, 4, Decimal("100")))
    log_before = ledger.get_transactions()

    with pytest.raises(InvalidQuantityError):
        ledger.record_transaction(_txn(stock, OrderType.BUY, quantity, Decimal("100")))

    assert ledger.get_transactions() == log_before
    assert ledger.get_asset("TEST").quantity == 4
    assert ledger.get_asset("TEST").average_cost == Decimal("100")


def test_float_price_is_stored_as_decimal(ledger, stock):
    stored = ledger.record_transaction(_txn(stock, OrderType.BUY, 2, 99.5))

    assert stored.price == Decimal("99.5")
    assert isinstance(ledger.get_transactions()[0].price, Decimal)
    assert ledger.get_asset("TEST").average_cost == Decimal("99.5")


@pytest.mark.parametrize("price", ["abc", float("nan"), Decimal("Infinity"), False])
def test_non_numeric_price_rejected(ledger, stock, price):
    with pytest.raises(InvalidPriceError):
        ledger.record_transaction(_txn(stock, OrderType.BUY, 1, price))

    assert ledger.get_transaction_count() == 0
    assert ledger.get_asset_count() == 0


def test_transaction_log_copy_cannot_rewrite_ledger(ledger, stock):
    returned = ledger.record_transaction(_txn(stock, OrderType.BUY, 2, Decimal("100")))
    returned.asset.symbol = "OTHER"

    snapshot = ledger.get_transactions()
    snapshot[0].asset.symbol = "HACKED"
    snapshot[0].asset.name = "Hacked"

    stored = ledger.get_transactions()[0]
    assert stored.symbol == "TEST"
    assert stored.asset.name == "Test Stock"
    assert set(ledger.get_holdings()) == {"TEST"}


def test_concurrent_buys_and_reads_stay_consistent(fixed_prices):
    ledger = PortfolioLedger()
    service = TradingService(ledger)
    stock = Asset.stock("TEST", "Test Stock", fixed_prices)
    writers, buys_per_writer = 4, 50
    errors = []
    done = threading.Event()

    def write():
        try:
            for _ in range(buys_per_writer):
                service.buy(stock, 1, Decimal("100"))
        except Exception as e:  # reported below
            errors.append(e)

    def read():
        try:
            while not done.is_set():
                holdings = ledger.get_holdings()
                value = ledger.get_total_value()
                # Price is fixed at 100, so every snapshot is a whole number of units
                assert value % Decimal("100") == 0
                if "TEST" in holdings:
                    assert holdings["TEST"].average_cost == Decimal("100")
        except Exception as e:  # reported below
            errors.append(e)

    readers = [threading.Thread(target=read) for _ in range(2)]
    writer_threads = [threading.Thread(target=write) for _ in range(writers)]
    for thread in readers + writer_threads:
        thread.start()
    for thread in writer_threads:
        thread.join()
    done.set()
    for thread in readers:
        thread.join()

    assert errors == []
    assert ledger.get_asset("TEST").quantity == writers * buys_per_writer
    assert ledger.get_transaction_count() == writers * buys_per_writer
    assert ledger.get_total_value() == Decimal("100") * writers * buys_per_writer
