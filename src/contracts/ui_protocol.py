"""Web UI websocket event, state, and client message constants."""

from __future__ import annotations

# Websocket event types (server -> client)
EVENT_HELLO = "hello"
EVENT_STATE_UPDATE = "state_update"
EVENT_BUTTON = "button"
EVENT_ERROR = "error"
EVENT_PLAYBACK_STARTED = "playback_started"
EVENT_PLAYBACK_STOPPED = "playback_stopped"

# Button frame modes
MODE_FULL = "full"
MODE_RUNNING = "running"
MODE_PAUSED = "paused"
MODE_COMPLETION = "completion"
MODE_RESET = "reset"

# UI runtime states
STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_ERROR = "error"

# Client message types (client -> server)
CLIENT_APPEAR = "appear"
CLIENT_DISAPPEAR = "disappear"
CLIENT_KEY_DOWN = "key_down"
CLIENT_KEY_UP = "key_up"
CLIENT_PRESS = "press"
CLIENT_SETTINGS = "settings"
CLIENT_PREVIEW_SOUND = "preview_sound"
CLIENT_STOP_SOUND = "stop_sound"

# Instance used by client messages that do not name one
DEFAULT_INSTANCE_ID = "default"

# Gesture names accepted by `press` messages
GESTURE_SHORT = "short"
GESTURE_DOUBLE = "double"
GESTURE_LONG = "long"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_STATE_UPDATE,
        EVENT_BUTTON,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_BUTTON,
    EVENT_ERROR,
    EVENT_STATE_UPDATE,
)
