"""Internal constants shared across the library."""

USER_AGENT = "orderwatch/1 (+aiohttp)"

ORDERS_ENDPOINT = "/rest/v1/orders"
ORDER_STATUS_PENDING = "Pendiente"
ORDER_SELECT = "*,clients(name,phone),locals(name,address)"
DEFAULT_FETCH_LIMIT = 5

# ------------------------------------------------------------------
# Session store keys (shared with the host application)
# ------------------------------------------------------------------

KEY_DRIVER = "driver"
KEY_IS_ONLINE = "isOnline"
KEY_SUPABASE_URL = "supabase_url"
KEY_SUPABASE_KEY = "supabase_key"
KEY_LAST_NOTIFIED_ORDER_ID = "last_notified_order_id"

# ------------------------------------------------------------------
# Scheduling cadence
# ------------------------------------------------------------------

PERIODIC_WORK_NAME = "order_notification_work"
PERIODIC_INTERVAL_S: float = 15 * 60
PERIODIC_INITIAL_DELAY_S: float = 60
BURST_DELAYS_S: tuple[float, ...] = (15, 30, 45, 60, 120, 180, 300, 420, 600)

BACKOFF_INITIAL_S: float = 30
BACKOFF_MAX_S: float = 5 * 3600

# ------------------------------------------------------------------
# Notification channel
# ------------------------------------------------------------------

CHANNEL_ID = "new_orders_channel"
NOTIFICATION_ID = 1001
VIBRATION_PATTERN_MS: tuple[int, ...] = (0, 500, 200, 500)
