# ==============================================================================
# Record Keys
# ==============================================================================

# Keys the host puts on records to locate the object behind a row
DOCUMENT_PATH_KEY = "DocumentPath"
HANDLE_KEY = "Handle"
OBJECT_REF_KEY = "ObjectRef"

# Key of the synthetic record returned when the user confirms a search with no row
SEARCH_TEXT_KEY = "__SEARCH_TEXT__"

# ==============================================================================
# Editable Columns
# ==============================================================================

# Column names (lowercase) whose cells can be edited in edit mode
EDITABLE_COLUMNS: frozenset[str] = frozenset(
    {
        "name",
        "dynamicblockname",
        "contents",
        "value",
        "layer",
        "color",
        "linetype",
        "layout",
        "papersize",
        "plotstyletable",
        "plotrotation",
        "plotconfigurationname",
        "plotscale",
        "plottype",
        "plotcentered",
        "centerx",
        "centery",
        "centerz",
        "scalex",
        "scaley",
        "scalez",
        "rotation",
        "width",
        "height",
        "radius",
        "textheight",
        "widthfactor",
        "query",
        "tags",
        "xrefpath",
        # Layer record properties
        "isfrozen",
        "islocked",
        "isoff",
        "isplottable",
        "lineweight",
        "transparency",
        "description",
    }
)

# Dynamic column families: attr_<TAG>, xdata_<APP>, ext_dict_<KEY>, tag_<NAME>
ATTRIBUTE_PREFIX = "attr_"
XDATA_PREFIX = "xdata_"
EXT_DICT_PREFIX = "ext_dict_"
TAG_PREFIX = "tag_"

EDITABLE_PREFIXES: tuple[str, ...] = (ATTRIBUTE_PREFIX, XDATA_PREFIX, EXT_DICT_PREFIX, TAG_PREFIX)

# ==============================================================================
# Engine Limits
# ==============================================================================

# Maximum number of simultaneous sort keys
MAX_SORT_CRITERIA = 3

# Above this many records, keystrokes in the search box are debounced
DEBOUNCE_RECORD_THRESHOLD = 200
DEBOUNCE_DELAY_MS = 200

# Auto-size columns only when there are fewer columns than this
AUTO_SIZE_MAX_COLUMNS = 20

# ==============================================================================
# Edit Mode Colors
# ==============================================================================

COLOR_EDITABLE_HEADER_BG = "#90ee90"  # light green
COLOR_READONLY_HEADER_BG = "#d3d3d3"  # light gray
COLOR_READONLY_HEADER_FG = "#a9a9a9"  # dark gray
COLOR_READONLY_CELL_BG = "#f5f5f5"  # white smoke
COLOR_READONLY_CELL_FG = "#808080"  # gray
COLOR_PENDING_CELL_BG = "#fff3b0"  # pale yellow
