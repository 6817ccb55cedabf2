"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Device wire protocol
FRAME_STX = 0xA5
FRAME_CHANNEL_SIZE = 4
FRAME_HEADER_SIZE = 8
RESPONSE_HEADER_SIZE = 9
FRAME_CRC_SIZE = 2
MAX_PAYLOAD_SIZE = 400
ACK_FLAG = 0x80
RECORD_SIZE = 14
MAX_DOWNLOAD_COUNT = 25
DEVICE_EPOCH_YEAR = 2000

DEFAULT_DEVICE_PORT = 5010
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_COMMAND_TIMEOUT = 2.0

# Reconciliation
DEFAULT_OVERTIME_CHECKOUT_MINUTES = 30
DEFAULT_RECORD_MAX_YEAR_DRIFT = 5
DEFAULT_RECORD_CACHE_SIZE = 10000
DEFAULT_RECORD_MAX_ATTEMPTS = 3
# An open overnight shift still accepts a checkout this long after its end.
OVERNIGHT_CHECKOUT_HOURS = 12
