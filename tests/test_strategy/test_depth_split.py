"""Tests for the order-book splitting allocator.

Verifies:
- No offers when funds are below the minimum loan size
- High-hold slice (amount cap, 30 days, omitted when not above minimum)
- Split count shrinking instead of undersized offers
- Depth walk, min-rate clamping and thirty-day period selection
- Empty lendbook handling
"""

from decimal import Decimal

import pytest

from lendbot.config import DepthSplitSettings
from lendbot.models import Lend, LendBook, OrderBookLevel
from lendbot.strategy.depth_split import allocate_depth_split


def _book(*daily_rates: str, amount: str = "0") -> LendBook:
    return LendBook(
        asks=tuple(
            OrderBookLevel(rate=Decimal(r) * 365, amount=Decimal(amount))
            for r in daily_rates
        )
    )


@pytest.fixture
def stepped_book() -> LendBook:
    """Asks at 0.1, 0.2 ... 5.0 %/day with 0.1 available at each level."""
    return LendBook(
        asks=tuple(
            OrderBookLevel(rate=Decimal("0.1") * i * 365, amount=Decimal("0.1"))
            for i in range(1, 51)
        )
    )


class TestMinDailyRate:
    """A single split below the minimum rate is raised to the minimum."""

    @pytest.fixture
    def settings(self) -> DepthSplitSettings:
        return DepthSplitSettings(
            min_daily_rate=Decimal("1"),
            num_splits=1,
            gap_bottom=Decimal("0"),
            gap_top=Decimal("0"),
        )

    def test_single_offer_at_min_rate(self, settings: DepthSplitSettings) -> None:
        actions = allocate_depth_split(
            Decimal("100"), Decimal("0"), _book("0.1", "0.2", "0.3"), settings
        )

        assert actions == [
            Lend(amount=Decimal("100"), annual_rate=Decimal("365"), period_days=2)
        ]

    def test_insufficient_funds_returns_nothing(self, settings: DepthSplitSettings) -> None:
        actions = allocate_depth_split(
            Decimal("100"), Decimal("101"), _book("0.1", "0.2", "0.3"), settings
        )
        assert actions == []


class TestThirtyDayThreshold:
    """Rates at or above the threshold are lent for 30 days."""

    def test_rate_equal_to_threshold_is_thirty_days(self) -> None:
        settings = DepthSplitSettings(
            min_daily_rate=Decimal("0.1"),
            num_splits=1,
            gap_bottom=Decimal("0"),
            thirty_day_threshold_daily=Decimal("1"),
        )
        actions = allocate_depth_split(
            Decimal("100"), Decimal("0"), _book("1", "2", "3"), settings
        )

        assert len(actions) == 1
        assert actions[0].annual_rate == Decimal("365")
        assert actions[0].period_days == 30
        assert actions[0].amount == Decimal("100")

    def test_zero_threshold_disables_thirty_days(self) -> None:
        settings = DepthSplitSettings(
            min_daily_rate=Decimal("0.1"),
            num_splits=1,
            thirty_day_threshold_daily=Decimal("0"),
        )
        actions = allocate_depth_split(
            Decimal("100"), Decimal("0"), _book("5"), settings
        )
        assert actions[0].period_days == 2


class TestHighHold:
    """High-hold offer carved out before splitting."""

    @pytest.fixture
    def settings(self) -> DepthSplitSettings:
        return DepthSplitSettings(
            num_splits=0,
            high_hold_amount=Decimal("10"),
            high_hold_daily_rate=Decimal("1"),
        )

    def test_high_hold_only_with_empty_book(self, settings: DepthSplitSettings) -> None:
        actions = allocate_depth_split(Decimal("100"), Decimal("0"), LendBook(), settings)

        assert actions == [
            Lend(amount=Decimal("10"), annual_rate=Decimal("365"), period_days=30)
        ]

    def test_high_hold_capped_by_available_funds(self, settings: DepthSplitSettings) -> None:
        actions = allocate_depth_split(Decimal("5"), Decimal("0"), LendBook(), settings)

        assert len(actions) == 1
        assert actions[0].amount == Decimal("5")

    def test_high_hold_omitted_when_not_above_min_loan(
        self, settings: DepthSplitSettings
    ) -> None:
        actions = allocate_depth_split(Decimal("100"), Decimal("10"), LendBook(), settings)
        assert actions == []

    def test_high_hold_reduces_split_pool(self) -> None:
        settings = DepthSplitSettings(
            min_daily_rate=Decimal("0.01"),
            num_splits=2,
            high_hold_amount=Decimal("40"),
            high_hold_daily_rate=Decimal("0.5"),
        )
        actions = allocate_depth_split(
            Decimal("100"), Decimal("1"), _book("0.02", amount="10"), settings
        )

        assert [a.amount for a in actions] == [Decimal("40"), Decimal("30"), Decimal("30")]


class TestGeneralSplit:
    """Four splits over a stepped book plus a high-hold offer."""

    @pytest.fixture
    def settings(self) -> DepthSplitSettings:
        return DepthSplitSettings(
            num_splits=4,
            gap_bottom=Decimal("3.2"),
            gap_top=Decimal("4.3"),
            min_daily_rate=Decimal("3.3"),
            thirty_day_threshold_daily=Decimal("4"),
            high_hold_daily_rate=Decimal("365"),
            high_hold_amount=Decimal("10"),
        )

    def test_expected_offers(
        self, settings: DepthSplitSettings, stepped_book: LendBook
    ) -> None:
        actions = allocate_depth_split(Decimal("110"), Decimal("0"), stepped_book, settings)

        assert len(actions) == 5
        got = sorted((a.amount, a.annual_rate, a.period_days) for a in actions)
        expected = sorted(
            [
                (Decimal("10"), Decimal("365") * 365, 30),
                (Decimal("25"), Decimal("4.1") * 365, 30),
                (Decimal("25"), Decimal("3.3") * 365, 2),
                (Decimal("25"), Decimal("3.5") * 365, 2),
                (Decimal("25"), Decimal("3.8") * 365, 2),
            ]
        )
        assert got == expected

    def test_high_hold_first_then_depth_order(
        self, settings: DepthSplitSettings, stepped_book: LendBook
    ) -> None:
        actions = allocate_depth_split(Decimal("110"), Decimal("0"), stepped_book, settings)

        assert actions[0].period_days == 30
        assert actions[0].amount == Decimal("10")
        split_rates = [a.annual_rate for a in actions[1:]]
        assert split_rates == sorted(split_rates)

    def test_total_never_exceeds_available(
        self, settings: DepthSplitSettings, stepped_book: LendBook
    ) -> None:
        for funds in ("110", "37.123456789", "10.5", "1000.00000001"):
            actions = allocate_depth_split(Decimal(funds), Decimal("0"), stepped_book, settings)
            assert sum(a.amount for a in actions) <= Decimal(funds)


class TestSplitShrinking:
    """The split count shrinks until every split exceeds the minimum."""

    @pytest.fixture
    def settings(self) -> DepthSplitSettings:
        return DepthSplitSettings(
            min_daily_rate=Decimal("0.01"),
            num_splits=5,
            gap_bottom=Decimal("0"),
            gap_top=Decimal("100"),
        )

    def test_shrinks_to_fit_min_loan(self, settings: DepthSplitSettings) -> None:
        # 120 / 5 = 24 <= 50, 120 / 4 = 30, 120 / 3 = 40, 120 / 2 = 60 > 50
        actions = allocate_depth_split(
            Decimal("120"), Decimal("50"), _book("0.02", amount="100"), settings
        )

        assert len(actions) == 2
        assert all(a.amount == Decimal("60") for a in actions)

    def test_no_split_possible_returns_high_hold_only(self) -> None:
        settings = DepthSplitSettings(
            num_splits=3,
            high_hold_amount=Decimal("60"),
            high_hold_daily_rate=Decimal("0.2"),
        )
        # 70 funds: 60 high-hold, 10 left; a split equal to the minimum is not allowed
        actions = allocate_depth_split(
            Decimal("70"), Decimal("10"), _book("0.02", amount="100"), settings
        )

        assert len(actions) == 1
        assert actions[0].period_days == 30

    def test_amounts_truncated_to_eight_places(self, settings: DepthSplitSettings) -> None:
        settings.num_splits = 3
        actions = allocate_depth_split(
            Decimal("100"), Decimal("0"), _book("0.02", amount="100"), settings
        )

        assert all(a.amount == Decimal("33.33333333") for a in actions)
        assert sum(a.amount for a in actions) <= Decimal("100")


class TestDepthWalk:
    """Depth pointer behaviour across splits."""

    def test_pointer_clamps_to_last_ask(self) -> None:
        settings = DepthSplitSettings(
            min_daily_rate=Decimal("0.01"),
            num_splits=3,
            gap_bottom=Decimal("0"),
            gap_top=Decimal("1000"),
        )
        book = _book("0.02", "0.03", amount="1")

        actions = allocate_depth_split(Decimal("300"), Decimal("0"), book, settings)

        assert [a.annual_rate for a in actions] == [
            Decimal("0.02") * 365,
            Decimal("0.03") * 365,
            Decimal("0.03") * 365,
        ]

    def test_empty_book_falls_back_to_min_rate(self) -> None:
        settings = DepthSplitSettings(
            min_daily_rate=Decimal("0.07"),
            num_splits=2,
            gap_bottom=Decimal("10"),
            gap_top=Decimal("20"),
            thirty_day_threshold_daily=Decimal("1"),
        )
        actions = allocate_depth_split(Decimal("200"), Decimal("0"), LendBook(), settings)

        assert len(actions) == 2
        assert all(a.annual_rate == Decimal("0.07") * 365 for a in actions)
        assert all(a.period_days == 2 for a in actions)

    def test_zero_splits_produces_no_split_offers(self) -> None:
        settings = DepthSplitSettings(num_splits=0)
        actions = allocate_depth_split(Decimal("200"), Decimal("0"), _book("0.1"), settings)
        assert actions == []


class TestFloatingReferenceQuote:
    """The FRR is a quote, never a level the depth walk can stop on."""

    @pytest.fixture
    def settings(self) -> DepthSplitSettings:
        return DepthSplitSettings(
            min_daily_rate=Decimal("0.01"),
            num_splits=1,
            gap_bottom=Decimal("0"),
            gap_top=Decimal("0"),
        )

    def test_frr_below_market_not_used(self, settings: DepthSplitSettings) -> None:
        book = LendBook(
            asks=_book("0.05", "0.06", amount="100").asks,
            floating_reference_rate=Decimal("0.02") * 365,
        )

        actions = allocate_depth_split(Decimal("100"), Decimal("0"), book, settings)

        assert actions == [
            Lend(amount=Decimal("100"), annual_rate=Decimal("0.05") * 365, period_days=2)
        ]

    def test_zero_amount_frr_level_skipped(self) -> None:
        settings = DepthSplitSettings(
            min_daily_rate=Decimal("0.01"),
            num_splits=2,
            gap_bottom=Decimal("0"),
            gap_top=Decimal("1000"),
        )
        book = LendBook(
            asks=(
                OrderBookLevel(
                    rate=Decimal("0.02") * 365,
                    amount=Decimal("0"),
                    is_floating_reference=True,
                ),
                OrderBookLevel(rate=Decimal("0.05") * 365, amount=Decimal("100")),
                OrderBookLevel(
                    rate=Decimal("0.09") * 365,
                    amount=Decimal("0"),
                    is_floating_reference=True,
                ),
            )
        )

        actions = allocate_depth_split(Decimal("200"), Decimal("0"), book, settings)

        # second split runs past the book and clamps to the last real ask
        assert [a.annual_rate for a in actions] == [
            Decimal("0.05") * 365,
            Decimal("0.05") * 365,
        ]
