"""
Unit tests for channel/bridge value conversion.

Tests percent scaling, mirek mapping, HSB/XY colour handling and alert tokens.
"""

import pytest

from hue_controller import converter
from hue_controller.structs import AlertMode, ColorMode, DeviceState, Effect, HSBCommand


class TestBrightnessConversion:
    """Tests for percent <-> bridge brightness"""

    def test_zero_percent_is_off(self):
        assert converter.to_brightness_state(0).to_payload() == {"on": False}

    def test_percent_scales_to_bridge_range(self):
        assert converter.to_brightness_state(10).to_payload() == {"on": True, "bri": 25}
        assert converter.to_brightness_state(100).to_payload() == {"on": True, "bri": 254}

    def test_tiny_percent_switches_on_without_brightness(self):
        assert converter.to_brightness_state(0.2).to_payload() == {"on": True}

    @pytest.mark.parametrize(
        ("brightness", "percent"),
        [(0, 0), (127, 50), (254, 100), (255, 100)],
    )
    def test_bridge_brightness_to_percent(self, brightness, percent):
        assert converter.to_brightness_percent(DeviceState(on=True, brightness=brightness)) == percent


class TestColorTemperatureConversion:
    """Tests for percent <-> mirek"""

    def test_percent_range_maps_to_mirek_range(self):
        assert converter.to_color_temperature_state(0).color_temperature == 153
        assert converter.to_color_temperature_state(100).color_temperature == 500

    def test_mirek_to_percent(self):
        assert converter.to_color_temperature_percent(DeviceState(color_temperature=153)) == 0
        assert converter.to_color_temperature_percent(DeviceState(color_temperature=500)) == 100

    def test_out_of_range_mirek_is_clamped(self):
        assert converter.to_color_temperature_percent(DeviceState(color_temperature=600)) == 100

    def test_unknown_mirek_is_none(self):
        assert converter.to_color_temperature_percent(DeviceState()) is None


class TestColorConversion:
    """Tests for HSB commands and colour channel values"""

    def test_hs_mode_uses_hue_and_saturation(self):
        state = DeviceState(on=True, color_mode=ColorMode.HS)
        update = converter.to_color_state(HSBCommand(hue=120, saturation=100, brightness=10), state)

        assert update.to_payload() == {"hue": 21845, "sat": 254, "bri": 25}

    def test_xy_mode_uses_xy(self):
        state = DeviceState(on=True, color_mode=ColorMode.XY, xy=(0.3, 0.3))
        update = converter.to_color_state(HSBCommand(hue=0, saturation=100, brightness=100), state)

        assert update.hue is None
        assert update.xy is not None
        assert update.xy[0] == pytest.approx(0.7006, abs=1e-3)
        assert update.xy[1] == pytest.approx(0.2993, abs=1e-3)

    def test_colour_without_snapshot_uses_hue_and_saturation(self):
        update = converter.to_color_state(HSBCommand(hue=0, saturation=0, brightness=10), None)

        assert update.to_payload() == {"hue": 0, "sat": 0, "bri": 25}

    def test_hsb_value_from_hs_state(self):
        state = DeviceState(on=True, brightness=254, hue=65535, saturation=254, color_mode=ColorMode.HS)

        value = converter.to_hsb_value(state)

        assert (value.hue, value.saturation, value.brightness) == (360, 100, 100)

    def test_hsb_value_from_xy_state(self):
        x, y = converter.hsb_to_xy(0, 100)
        state = DeviceState(on=True, brightness=127, xy=(x, y), color_mode=ColorMode.XY)

        value = converter.to_hsb_value(state)

        assert value.hue in (0, 1, 359, 360)
        assert value.saturation >= 99
        assert value.brightness == 50

    def test_zero_y_has_no_hue_or_saturation(self):
        assert converter.xy_to_hue_saturation(0.3, 0.0) == (0.0, 0.0)

    @pytest.mark.parametrize("brightness", [1, 5, 50, 100])
    def test_xy_does_not_depend_on_brightness(self, brightness):
        state = DeviceState(on=True, color_mode=ColorMode.XY, xy=(0.3, 0.3))

        dim = converter.to_color_state(HSBCommand(hue=30, saturation=50, brightness=brightness), state)
        full = converter.to_color_state(HSBCommand(hue=30, saturation=50, brightness=100), state)

        assert dim.xy == full.xy
        assert dim.xy == converter.hsb_to_xy(30, 50)


class TestAlertAndEffect:
    """Tests for alert tokens and effect switching"""

    @pytest.mark.parametrize(
        ("token", "mode"),
        [("NONE", AlertMode.NONE), ("SELECT", AlertMode.SELECT), ("lselect", AlertMode.LSELECT)],
    )
    def test_known_tokens(self, token, mode):
        update = converter.to_alert_state(token)

        assert update is not None
        assert update.alert == mode

    def test_unknown_token_is_rejected(self):
        assert converter.to_alert_state("BLINK") is None

    def test_alert_token_from_state(self):
        assert converter.to_alert_token(DeviceState(alert=AlertMode.LSELECT)) == "LSELECT"
        assert converter.to_alert_token(DeviceState()) is None

    def test_effect_on_off(self):
        assert converter.to_effect_state(True).effect == Effect.COLORLOOP
        assert converter.to_effect_state(False).effect == Effect.NONE
