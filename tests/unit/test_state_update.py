"""
Unit tests for the StateUpdate builder.

Tests on/off exclusivity, zero-brightness handling, payload rendering and freezing.
"""

import pytest

from hue_controller.state_update import StateUpdate, StateUpdateFrozenError, create_brightness_state_update
from hue_controller.structs import AlertMode, Effect


class TestStateUpdateBuilder:
    """Tests for chained setters"""

    def test_new_update_is_empty(self):
        assert StateUpdate().is_empty()
        assert StateUpdate().to_payload() == {}

    def test_chained_setters_render_bridge_fields(self):
        update = (
            StateUpdate()
            .turn_on()
            .set_brightness(200)
            .set_color_temperature(366)
            .set_transition_time(4)
            .set_alert(AlertMode.SELECT)
            .set_effect(Effect.COLORLOOP)
        )

        assert update.to_payload() == {
            "on": True,
            "bri": 200,
            "ct": 366,
            "transitiontime": 4,
            "alert": "select",
            "effect": "colorloop",
        }

    def test_zero_brightness_turns_off_and_drops_stale_brightness(self):
        update = StateUpdate().set_brightness(120).set_brightness(0)

        assert update.to_payload() == {"on": False}
        assert update.brightness is None

    def test_turn_off_clears_brightness(self):
        update = StateUpdate().turn_on().set_brightness(80).turn_off()

        assert update.on is False
        assert update.brightness is None

    def test_hs_and_xy_are_exclusive(self):
        update = StateUpdate().set_hs(1000, 200).set_xy(0.3, 0.4)
        assert update.to_payload() == {"xy": [0.3, 0.4]}

        update.set_hs(2000, 100)
        assert update.to_payload() == {"hue": 2000, "sat": 100}

    def test_equality_compares_payloads(self):
        assert StateUpdate().turn_off() == StateUpdate().set_on(False)
        assert StateUpdate().turn_on() != StateUpdate().turn_off()


class TestStateUpdateFreeze:
    """Tests for read-only updates after hand-off"""

    def test_frozen_update_rejects_changes(self):
        update = StateUpdate().turn_on().freeze()

        assert update.frozen
        with pytest.raises(StateUpdateFrozenError):
            update.set_brightness(10)

    def test_frozen_update_still_renders(self):
        update = StateUpdate().set_brightness(10).freeze()
        assert update.to_payload() == {"bri": 10}


class TestCreateBrightnessStateUpdate:
    """Tests for create_brightness_state_update()"""

    @pytest.mark.parametrize("current", [0, 1, 100, 255])
    def test_new_zero_is_off_without_brightness(self, current):
        update = create_brightness_state_update(current, 0)

        assert update.on is False
        assert update.brightness is None

    @pytest.mark.parametrize("new", [1, 25, 255])
    def test_leaving_zero_turns_on(self, new):
        update = create_brightness_state_update(0, new)

        assert update.to_payload() == {"on": True, "bri": new}

    def test_change_while_on_only_sets_brightness(self):
        update = create_brightness_state_update(100, 125)

        assert update.to_payload() == {"bri": 125}
