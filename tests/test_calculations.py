#!/usr/bin/env python3
"""Tests for calculation helper functions."""
from datetime import date
from decimal import Decimal

import pytest
from fleet import ServiceRecord, ServiceStatus, days_overdue, derive_status, forecast_windows, month_bounds, parse_local_date
from fleet.calculations import in_window, sum_amounts, to_decimal


def make_service(status=ServiceStatus.PENDING, due_date=None, amount=1000):
    return ServiceRecord(1, "Construtora Alfa", "ABC1D23", amount, "2024-01-05", due_date, status=status)


class TestParseLocalDate:
    """Tests for parse_local_date helper function."""

    def test_plain_date_string_is_calendar_day(self):
        """YYYY-MM-DD is the same calendar day, never shifted by a zone."""
        assert parse_local_date("2024-01-20") == date(2024, 1, 20)

    def test_passes_dates_through(self):
        assert parse_local_date(date(2024, 1, 20)) == date(2024, 1, 20)

    def test_empty_and_none(self):
        assert parse_local_date(None) is None
        assert parse_local_date("") is None
        assert parse_local_date("   ") is None

    def test_unparseable_returns_none(self):
        assert parse_local_date("20/01/2024") is None
        assert parse_local_date("2024-02-30") is None
        assert parse_local_date("soon") is None


class TestToDecimal:
    """Tests for to_decimal helper function."""

    def test_float_goes_through_string(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_int_and_text(self):
        assert to_decimal(1500) == Decimal("1500")
        assert to_decimal("1234.56") == Decimal("1234.56")

    def test_none_is_zero(self):
        assert to_decimal(None) == Decimal("0")


class TestDeriveStatus:
    """Tests for derive_status helper function."""

    today = date(2024, 1, 10)

    def test_canceled_wins_over_due_date(self):
        svc = make_service(ServiceStatus.CANCELED, "2023-12-01")
        assert derive_status(svc, self.today) == ServiceStatus.CANCELED

    def test_paid_wins_over_due_date(self):
        svc = make_service(ServiceStatus.PAID, "2023-12-01")
        assert derive_status(svc, self.today) == ServiceStatus.PAID
        svc = make_service(ServiceStatus.PAID, "2024-02-01")
        assert derive_status(svc, self.today) == ServiceStatus.PAID

    def test_future_due_date_is_upcoming(self):
        svc = make_service(ServiceStatus.PENDING, "2024-01-20")
        assert derive_status(svc, self.today) == ServiceStatus.UPCOMING

    def test_stored_overdue_with_future_due_date_is_upcoming(self):
        svc = make_service(ServiceStatus.OVERDUE, "2024-01-11")
        assert derive_status(svc, self.today) == ServiceStatus.UPCOMING

    def test_due_today_is_overdue(self):
        """Upcoming needs a due date strictly after today."""
        svc = make_service(ServiceStatus.PENDING, "2024-01-10")
        assert derive_status(svc, self.today) == ServiceStatus.OVERDUE

    def test_past_due_date_is_overdue(self):
        svc = make_service(ServiceStatus.PENDING, "2024-01-20")
        assert derive_status(svc, date(2024, 1, 25)) == ServiceStatus.OVERDUE

    def test_missing_due_date_is_overdue(self):
        assert derive_status(make_service(due_date=None), self.today) == ServiceStatus.OVERDUE

    def test_unparseable_due_date_is_overdue(self):
        assert derive_status(make_service(due_date="next week"), self.today) == ServiceStatus.OVERDUE

    def test_does_not_mutate_stored_status(self):
        svc = make_service(ServiceStatus.PENDING, "2024-01-20")
        derive_status(svc, self.today)
        assert svc.status == ServiceStatus.PENDING

    def test_idempotent(self):
        svc = make_service(ServiceStatus.PENDING, "2024-01-20")
        assert derive_status(svc, self.today) == derive_status(svc, self.today)


class TestDaysOverdue:
    """Tests for days_overdue helper function."""

    def test_counts_days_since_due(self):
        svc = make_service(ServiceStatus.PENDING, "2024-01-20")
        assert days_overdue(svc, date(2024, 1, 25)) == 5

    def test_zero_on_due_day(self):
        svc = make_service(ServiceStatus.PENDING, "2024-01-20")
        assert days_overdue(svc, date(2024, 1, 20)) == 0

    def test_none_when_upcoming(self):
        svc = make_service(ServiceStatus.PENDING, "2024-01-20")
        assert days_overdue(svc, date(2024, 1, 10)) is None

    def test_none_when_paid(self):
        svc = make_service(ServiceStatus.PAID, "2024-01-01")
        assert days_overdue(svc, date(2024, 1, 25)) is None

    def test_none_without_due_date(self):
        """Overdue by policy, but there is nothing to count from."""
        assert days_overdue(make_service(due_date=None), date(2024, 1, 25)) is None


class TestMonthBounds:
    """Tests for month_bounds helper function."""

    def test_regular_month(self):
        assert month_bounds(2024, 1) == (date(2024, 1, 1), date(2024, 1, 31))

    def test_leap_february(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_december(self):
        assert month_bounds(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31))


class TestForecastWindows:
    """Tests for forecast_windows helper function."""

    def test_three_adjacent_windows(self):
        windows = forecast_windows(date(2024, 1, 10))
        assert [(start, end) for _, start, end in windows] == [
            (date(2024, 1, 10), date(2024, 1, 17)),
            (date(2024, 1, 18), date(2024, 1, 25)),
            (date(2024, 1, 26), date(2024, 2, 9)),
        ]

    def test_labels(self):
        labels = [label for label, _, _ in forecast_windows(date(2024, 1, 10))]
        assert labels == ["Próximos 7 dias", "Próximos 15 dias", "Próximos 30 dias"]


class TestInWindow:
    """Tests for in_window helper function."""

    def test_inclusive_both_ends(self):
        start, end = date(2024, 1, 1), date(2024, 1, 8)
        assert in_window(start, start, end)
        assert in_window(end, start, end)
        assert not in_window(date(2024, 1, 9), start, end)

    def test_missing_day_is_outside(self):
        assert not in_window(None, date(2024, 1, 1), date(2024, 1, 8))


class TestSumAmounts:
    """Tests for sum_amounts helper function."""

    def test_empty_is_decimal_zero(self):
        total = sum_amounts([], "gross_amount")
        assert total == Decimal("0")
        assert isinstance(total, Decimal)

    def test_exact_decimal_addition(self):
        services = [make_service(amount="0.10"), make_service(amount="0.20")]
        assert sum_amounts(services, "gross_amount") == Decimal("0.30")
