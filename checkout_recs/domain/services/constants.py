# Constants for the checkout recommendation panel.
MAX_OFFERS = 3  # Offers shown in the panel after filtering
CATALOG_PAGE_SIZE = 10  # Products read by the (deprecated) catalog source
ADD_QUANTITY = 1  # Quantity added per "Add" press

# Seconds the add-to-cart error banner stays visible
ERROR_BANNER_TIMEOUT_S = 3.0

# Panel copy
PANEL_HEADING = "You might also like"
ADD_BUTTON_LABEL = "Add"
ADD_ERROR_MESSAGE = "There was an issue adding this product. Please try again."

# Diagnostic event names
EVENT_FETCH_FAILED = "recommendations.fetch_failed"
EVENT_STALE_CYCLE = "recommendations.stale_cycle_discarded"
EVENT_ADD_FAILED = "recommendations.add_failed"

# Recommendation sources
SOURCE_METAFIELD = "metafield"
SOURCE_CATALOG = "catalog"
ALL_SOURCES = {SOURCE_METAFIELD, SOURCE_CATALOG}
