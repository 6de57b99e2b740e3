"""Internal constants shared across the library."""

STORE_API_PATH = "/api/v1/store"
USER_AGENT = "pyancla"

# Request and response headers understood by the item store.
ITEM_OWNER_HEADER = "X-Xmidt-Owner"
STORE_ERROR_HEADER = "X-Xmidt-Error"

DEFAULT_PULL_INTERVAL: float = 5.0
DEFAULT_REQUEST_TIMEOUT: float = 30.0

# ------------------------------------------------------------------
# Metrics
# ------------------------------------------------------------------

POLLS_TOTAL_COUNTER = "chrysom_polls_total"
POLLS_TOTAL_COUNTER_HELP = "Counter for the number of polls (and their success/failure outcomes) to fetch new items."
WEBHOOK_LIST_SIZE_GAUGE = "webhook_list_size_value"
WEBHOOK_LIST_SIZE_GAUGE_HELP = "Size of the current list of webhooks."
OUTCOME_LABEL = "outcome"
