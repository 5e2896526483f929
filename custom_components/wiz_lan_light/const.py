"""Constants for the WiZ LAN Light integration."""

DOMAIN = "wiz_lan_light"

# UDP port the bulb listens on
DEFAULT_PORT = 38899
DEFAULT_HOST = "127.0.0.1"

# Timeouts (seconds)
TIMEOUT_COMMAND = 1.0

# Replies seen in practice are well under this; larger datagrams get
# truncated by the read and then fail to decode.
MAX_REPLY_SIZE = 1024

METHOD_SET_PILOT = "setPilot"

# Pulse effect: (dimming, hold in seconds) for the low and high states
PULSE_LOW = (10, 0.2)
PULSE_HIGH = (100, 0.8)
EFFECT_PULSE = "Pulse"

# Dimming range accepted by the bulb
MIN_DIMMING = 10
MAX_DIMMING = 100
