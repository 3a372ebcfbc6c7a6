"""Internal constants shared across the library."""

DEFAULT_HOST = "192.168.4.1"
DEFAULT_PORT = 8888
DEFAULT_PATH = "/"

#: Fixed delay between a detected closure and the next connection attempt.
RECONNECT_DELAY_S: float = 2.5
#: Sampling window of the inbound message rate.
RATE_WINDOW_S: float = 1.0
#: Seconds an unconfirmed autonomy prediction is shown before reverting.
PREDICTION_TTL_S: float = 5.0
#: Seconds allowed for the WebSocket handshake.
OPEN_TIMEOUT_S: float = 5.0

# ------------------------------------------------------------------
# Wire protocol
# ------------------------------------------------------------------

PACKET_TELEMETRY = "telemetry"
PACKET_UI_CMD = "ui_cmd"

#: Generic ``last_error`` code recorded on any transport failure.
ERROR_CONNECTION_FAILED = "connection_failed"
