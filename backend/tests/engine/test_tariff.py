"""Tests for engine.grid.tariff -- hourly price lookups and force-charge mask."""

from __future__ import annotations

import pytest

from engine.grid.tariff import TariffSchedule


class TestTariffSchedule:

    def test_flat_prices_every_hour(self):
        t = TariffSchedule.flat(0.25, 0.05)
        assert all(t.buy_price(h) == 0.25 for h in range(24))
        assert all(t.sell_price(h) == 0.05 for h in range(24))
        assert not t.has_force_charge_hours

    def test_hourly_lookup(self):
        imports = [0.1 * (h + 1) for h in range(24)]
        t = TariffSchedule(import_prices=imports, export_prices=[0.0] * 24)
        assert t.buy_price(0) == pytest.approx(0.1)
        assert t.buy_price(23) == pytest.approx(2.4)
        assert isinstance(t.import_prices, tuple)

    def test_force_charge_hours_from_list(self):
        t = TariffSchedule.flat(0.3, 0.1, force_charge_hours=[2, 3])
        assert t.is_force_charge_hour(2)
        assert t.is_force_charge_hour(3)
        assert not t.is_force_charge_hour(4)
        assert t.has_force_charge_hours

    def test_wrong_length_rejected(self):
        with pytest.raises(ValueError, match="24 entries"):
            TariffSchedule(import_prices=[0.1] * 23, export_prices=[0.1] * 24)

    def test_negative_price_rejected(self):
        prices = [0.1] * 24
        prices[5] = -0.2
        with pytest.raises(ValueError, match=r"import_prices\[5\]"):
            TariffSchedule(import_prices=prices, export_prices=[0.1] * 24)

    def test_nan_price_rejected(self):
        prices = [0.1] * 24
        prices[0] = float("nan")
        with pytest.raises(ValueError, match="finite"):
            TariffSchedule(import_prices=[0.1] * 24, export_prices=prices)

    def test_invalid_force_charge_hour(self):
        with pytest.raises(ValueError, match="0..23"):
            TariffSchedule.flat(0.3, 0.1, force_charge_hours=[24])


class TestLookahead:

    def test_window_excludes_current_hour(self):
        t = TariffSchedule.flat(0.3, 0.1, force_charge_hours=[2])
        assert not t.force_charge_within(2, 4)
        assert t.force_charge_within(1, 4)

    def test_window_length(self):
        t = TariffSchedule.flat(0.3, 0.1, force_charge_hours=[10])
        assert t.force_charge_within(6, 4)
        assert not t.force_charge_within(5, 4)

    def test_window_wraps_midnight(self):
        t = TariffSchedule.flat(0.3, 0.1, force_charge_hours=[1])
        assert t.force_charge_within(22, 4)
        assert t.force_charge_within(23, 4)
        assert not t.force_charge_within(20, 4)


class TestFromConfig:

    def test_flat(self):
        t = TariffSchedule.from_config(
            {"type": "flat", "buy_rate": 0.4, "sell_rate": 0.2, "force_charge_hours": [3]}
        )
        assert t.buy_price(12) == 0.4
        assert t.sell_price(12) == 0.2
        assert t.is_force_charge_hour(3)

    def test_hourly_with_bool_mask(self):
        mask = [h < 6 for h in range(24)]
        t = TariffSchedule.from_config(
            {
                "type": "hourly",
                "import_prices": [0.2] * 24,
                "export_prices": [0.1] * 24,
                "force_charge_hours": mask,
            }
        )
        assert t.force_charge_hours == tuple(mask)

    def test_defaults_when_missing(self):
        t = TariffSchedule.from_config(None)
        assert t.buy_price(0) == pytest.approx(0.30)
        assert t.sell_price(0) == pytest.approx(0.15)

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown tariff type"):
            TariffSchedule.from_config({"type": "tou"})

    @pytest.mark.parametrize("missing", ["import_prices", "export_prices"])
    def test_hourly_without_prices(self, missing):
        cfg = {"type": "hourly", "import_prices": [0.3] * 24, "export_prices": [0.1] * 24}
        del cfg[missing]
        with pytest.raises(ValueError, match="import_prices and export_prices"):
            TariffSchedule.from_config(cfg)

    def test_to_dict_lists_flagged_hours(self):
        t = TariffSchedule.flat(0.3, 0.1, force_charge_hours=[4, 2])
        assert t.to_dict()["force_charge_hours"] == [2, 4]
