# utils/constants.py

APP_VERSION = "v1.2.0"

# Workbook layout
HIERARCHY_SHEET = "Hierarchy"
PRICES_SHEET = "Prices"
HIERARCHY_HEADERS = ["Level ID", "Level Name", "Order", "Sheet"]

# Canonical columns of a level records sheet (parent columns are added per level)
NAME_COL = "Name"
VALUE_COL = "Value"
CATEGORY_COL = "Energy"
DATE_COL = "Date"
PARENT_COL_PREFIX = "Parent L"
CANON_HEADERS = [NAME_COL, VALUE_COL, CATEGORY_COL, DATE_COL]

# Price table columns
PRICE_START_COL = "Start Date"
PRICE_END_COL = "End Date"
PRICE_HEADERS = [PRICE_START_COL, PRICE_END_COL, "Price Elec", "Price Gaz", "Price Eau", "Price Air"]

# Hierarchy positions
ROOT_LEVEL = 0
FIRST_LEVEL = 1

# Category selection meaning "no filter"
ALL_CATEGORIES = "all"

# Parent references holding one of these values count as missing
MISSING_PARENT_SENTINELS = {"", "empty"}

# Placeholder nodes emitted when the selected period has no records
NO_DATA_SUFFIX = "No data"
NO_DATA_LABEL = "No data ({level_name})"

# Rendering
LEVEL_COLORS = ["#2196F3", "#4CAF50", "#FF9800", "#9C27B0", "#607D8B"]
LINK_COLOR = "rgba(224, 224, 224, 0.6)"
DEFAULT_CURRENCY = "€"
NODE_PADDING_STEPS = [(10, 35), (15, 30), (20, 25)]
NODE_PADDING_MIN = 20

# UI strings
TAB_ICONS = {"source": "📂", "sankey": "🔀", "data": "📋"}
