import os

from hue_controller import __version__

__all__ = [
    "ALERT_DURATION_LONG_SELECT_MS",
    "ALERT_DURATION_NONE",
    "ALERT_DURATION_SELECT_MS",
    "BRIGHTNESS_FACTOR",
    "BRIDGE_RECEIVER_TASK_NAME",
    "BRIGHTNESS_STEP",
    "COLOR_TEMPERATURE_FACTOR",
    "COLOR_TEMPERATURE_STEP",
    "COMMAND_RECEIVER_TASK_NAME",
    "CONFIG_TRANSITIONTIME",
    "HUE_BRIDGE_TOPIC",
    "HUE_CONFIG_FILE_PATH",
    "HUE_DEBUG",
    "HUE_FACTOR",
    "HUE_LOG_FORMAT",
    "HUE_LOG_HUMAN_OUTPUT",
    "HUE_LOG_JSON_FILE",
    "HUE_MQTT_HOST",
    "HUE_MQTT_PORT",
    "HUE_TOPIC",
    "HUE_VERSION",
    "MAX_BRIGHTNESS",
    "MAX_COLOR_TEMPERATURE",
    "MAX_HUE",
    "MAX_SATURATION",
    "MIN_BRIGHTNESS",
    "MIN_COLOR_TEMPERATURE",
    "PERSISTENT_BASE_DIR",
    "SATURATION_FACTOR",
    "YES_ANSWER",
]

YES_ANSWER = ("true", "1", "yes", "y", "t", 1, "on", "o")
HUE_VERSION: str = __version__

HUE_DEBUG = os.environ.get("HUE_DEBUG", "0").casefold() in YES_ANSWER

HUE_MQTT_HOST = os.environ.get("HUE_MQTT_HOST", "homeassistant.local")
_mqtt_port = os.environ.get("HUE_MQTT_PORT", "1883")
try:
    _mqtt_port_value: int = int(_mqtt_port) if _mqtt_port else 1883
except ValueError:
    _mqtt_port_value = 1883
HUE_MQTT_PORT: int = _mqtt_port_value
HUE_TOPIC = os.environ.get("HUE_TOPIC", "hue_controller")
HUE_BRIDGE_TOPIC = os.environ.get("HUE_BRIDGE_TOPIC", "hue_bridge")

PERSISTENT_BASE_DIR: str = os.environ.get("HUE_PERSISTENT_BASE_DIR", "/homeassistant/.storage/hue-controller/config")
HUE_CONFIG_FILE_PATH: str = os.environ.get("HUE_CONFIG_FILE_PATH", f"{PERSISTENT_BASE_DIR}/hue_groups.yaml")

# Logging Configuration
HUE_LOG_FORMAT: str = os.environ.get("HUE_LOG_FORMAT", "human")  # "json", "human", or "both"
_json_file = os.environ.get("HUE_LOG_JSON_FILE")
HUE_LOG_JSON_FILE: str | None = _json_file if _json_file else None
HUE_LOG_HUMAN_OUTPUT: str = os.environ.get("HUE_LOG_HUMAN_OUTPUT", "stdout")  # "stdout", "stderr", or file path

# Bridge value ranges. Brightness is 0-255 here even though bridges cap at 254.
MIN_BRIGHTNESS: int = 0
MAX_BRIGHTNESS: int = 255
MIN_COLOR_TEMPERATURE: int = 153
MAX_COLOR_TEMPERATURE: int = 500
MAX_HUE: int = 65535
MAX_SATURATION: int = 254

BRIGHTNESS_FACTOR: float = 2.54
SATURATION_FACTOR: float = 2.54
HUE_FACTOR: float = MAX_HUE / 360.0
COLOR_TEMPERATURE_FACTOR: float = (MAX_COLOR_TEMPERATURE - MIN_COLOR_TEMPERATURE) / 100.0

# Relative (INCREASE/DECREASE) steps
BRIGHTNESS_STEP: int = 25
COLOR_TEMPERATURE_STEP: int = 30

# Alert restore delays in milliseconds, -1 means "do not restore"
ALERT_DURATION_SELECT_MS: int = 2000
ALERT_DURATION_LONG_SELECT_MS: int = 15000
ALERT_DURATION_NONE: int = -1

CONFIG_TRANSITIONTIME = "transitiontime"

COMMAND_RECEIVER_TASK_NAME = "hue_command_receiver"
BRIDGE_RECEIVER_TASK_NAME = "hue_bridge_receiver"
