"""Tests for period-string date parsing."""

from datetime import date

import pytest

from cinegoods.utils.dates import is_upcoming, parse_period_date, split_period


class TestParsePeriodDate:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("24.03.02", date(2024, 3, 2)),
            ("2024.03.02", date(2024, 3, 2)),
            ("24.3.2(토)", date(2024, 3, 2)),
            ("기간: 24.12.31 까지", date(2024, 12, 31)),
        ],
    )
    def test_valid_dates(self, text, expected):
        assert parse_period_date(text) == expected

    @pytest.mark.parametrize("text", ["", "상시 진행", "24.13.01", "24.02.30"])
    def test_invalid_or_missing(self, text):
        assert parse_period_date(text) is None


class TestSplitPeriod:
    def test_start_and_end(self):
        assert split_period("24.03.02 ~ 24.03.10") == (date(2024, 3, 2), date(2024, 3, 10))

    def test_sold_out_has_no_end(self):
        assert split_period("24.03.15 ~ 소진 시") == (date(2024, 3, 15), None)

    def test_start_only(self):
        assert split_period("2024.03.15") == (date(2024, 3, 15), None)

    def test_empty(self):
        assert split_period("") == (None, None)


class TestIsUpcoming:
    TODAY = date(2024, 3, 1)

    def test_start_after_today(self):
        assert is_upcoming("24.03.02 ~ 24.03.10", self.TODAY) is True

    def test_start_before_today(self):
        assert is_upcoming("24.02.28 ~ 24.03.10", self.TODAY) is False

    def test_start_on_today_is_not_upcoming(self):
        assert is_upcoming("24.03.01 ~ 24.03.10", self.TODAY) is False

    def test_no_date_is_not_upcoming(self):
        assert is_upcoming("상시", self.TODAY) is False

    def test_defaults_to_korean_today(self, monkeypatch):
        monkeypatch.setattr("cinegoods.utils.dates.today_kst", lambda: date(2030, 1, 1))
        assert is_upcoming("29.12.31 ~ 30.01.05") is False
        assert is_upcoming("30.01.02 ~ 30.01.05") is True
