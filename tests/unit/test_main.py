"""
Unit tests for the controller entry point.

Tests handler wiring, startup/shutdown ordering, connection failures and the CLI.
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import aiomqtt
import pytest

from hue_controller import main as main_module
from hue_controller.config import GroupHandlerConfig
from hue_controller.main import HueController, main, parse_cli


async def _wait_forever(*args, **kwargs):
    await asyncio.Event().wait()


async def _endless_messages():
    await asyncio.Event().wait()
    yield


@pytest.fixture
def configs():
    return [
        GroupHandlerConfig(group_id="3", name="Living Room"),
        GroupHandlerConfig(group_id="7", transition_time=2),
    ]


@pytest.fixture
def mqtt_bridge():
    bridge = MagicMock()
    bridge.connect = AsyncMock(return_value=True)
    bridge.disconnect = AsyncMock()
    bridge.add_listener = MagicMock()
    bridge.get_device_state = MagicMock(return_value=None)
    bridge.start_receiver_task = AsyncMock(side_effect=_wait_forever)
    return bridge


@pytest.fixture
def state_publisher():
    publisher = MagicMock()
    publisher.connect = AsyncMock(return_value=True)
    publisher.disconnect = AsyncMock()
    publisher.publish = AsyncMock()
    publisher.client = MagicMock()
    publisher.client.subscribe = AsyncMock()
    publisher.client.messages = _endless_messages()
    return publisher


class TestHueController:
    """Tests for HueController"""

    def test_builds_one_handler_per_group(self, configs, mqtt_bridge, state_publisher):
        controller = HueController(configs, mqtt_bridge, state_publisher)

        assert set(controller.handlers) == {"3", "7"}
        assert controller.router.handlers is controller.handlers
        assert controller.handlers["7"].transition_time == 2

    @pytest.mark.asyncio
    async def test_run_until_stop_requested(self, configs, mqtt_bridge, state_publisher):
        controller = HueController(configs, mqtt_bridge, state_publisher)
        stop_event = asyncio.Event()

        running = asyncio.create_task(controller.run(stop_event))
        await asyncio.sleep(0.01)

        assert all(handler.attached for handler in controller.handlers.values())
        assert mqtt_bridge.add_listener.call_count == 2
        state_publisher.client.subscribe.assert_awaited_once_with("hue_controller/set/#", qos=0)
        mqtt_bridge.start_receiver_task.assert_awaited_once()

        stop_event.set()
        await running

        assert not any(handler.attached for handler in controller.handlers.values())
        assert controller.tasks == []
        mqtt_bridge.disconnect.assert_awaited_once()
        state_publisher.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_publisher_connect_failure_detaches_handlers(self, configs, mqtt_bridge, state_publisher):
        state_publisher.connect.return_value = False
        controller = HueController(configs, mqtt_bridge, state_publisher)

        with pytest.raises(ConnectionError):
            await controller.run(asyncio.Event())

        assert not any(handler.attached for handler in controller.handlers.values())
        mqtt_bridge.connect.assert_not_awaited()
        mqtt_bridge.start_receiver_task.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_receiver_failure_stops_controller(self, configs, mqtt_bridge, state_publisher, caplog):
        mqtt_bridge.start_receiver_task.side_effect = aiomqtt.MqttError("connection lost")
        controller = HueController(configs, mqtt_bridge, state_publisher)

        await controller.run(asyncio.Event())

        assert "hue_bridge_receiver stopped: connection lost" in caplog.text
        assert not any(handler.attached for handler in controller.handlers.values())
        state_publisher.disconnect.assert_awaited_once()


class TestCli:
    """Tests for parse_cli() and main()"""

    def test_parse_cli_flags(self, tmp_path):
        args = parse_cli(["--config", str(tmp_path / "groups.yaml"), "-D"])

        assert args.config == tmp_path / "groups.yaml"
        assert args.debug is True

    def test_parse_cli_defaults(self):
        args = parse_cli([])

        assert args.debug is False
        assert args.config.name == "hue_groups.yaml"

    def test_missing_config_exits_with_error(self, tmp_path, caplog):
        with patch.object(main_module.uvloop, "run") as mock_run:
            assert main(["--config", str(tmp_path / "missing.yaml")]) == 1

        mock_run.assert_not_called()
        assert "Configuration error" in caplog.text

    def test_runs_event_loop_with_loaded_groups(self, tmp_path):
        config_file = tmp_path / "groups.yaml"
        config_file.write_text("groups:\n  - group_id: 3\n")

        def fake_run(coro):
            coro.close()

        with patch.object(main_module.uvloop, "run", side_effect=fake_run) as mock_run:
            assert main(["--config", str(config_file)]) == 0

        mock_run.assert_called_once()

    def test_fatal_error_exits_with_error(self, tmp_path, caplog):
        config_file = tmp_path / "groups.yaml"
        config_file.write_text("groups: []\n")

        def fake_run(coro):
            coro.close()
            raise ConnectionError("broker down")

        with patch.object(main_module.uvloop, "run", side_effect=fake_run):
            assert main(["--config", str(config_file)]) == 1

        assert "Fatal error in main loop" in caplog.text

    def test_debug_flag_lowers_package_log_level(self, tmp_path):
        config_file = tmp_path / "groups.yaml"
        config_file.write_text("groups: []\n")
        group_logger = logging.getLogger("hue_controller.devices.group")
        previous = {
            name: existing.level
            for name, existing in logging.root.manager.loggerDict.items()
            if name.startswith("hue_controller") and isinstance(existing, logging.Logger)
        }

        try:
            with patch.object(main_module.uvloop, "run", side_effect=lambda coro: coro.close()):
                assert main(["--config", str(config_file), "--debug"]) == 0

            assert group_logger.level == logging.DEBUG
        finally:
            for name, level in previous.items():
                restored = logging.getLogger(name)
                restored.setLevel(level)
                for handler in restored.handlers:
                    handler.setLevel(level)
