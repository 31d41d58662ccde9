# io_utils/sheets.py
"""
Pure IO functions for hierarchy workbooks (upload or Google Sheets) and graph export.
No Streamlit dependencies - can be imported by both logic and UI modules.

Workbook layout:
  - "Hierarchy" sheet: Level ID, Level Name, Order, Sheet
  - one records sheet per level: Name, Value, Energy, Date, Parent L0..Parent L{n}
  - optional "Prices" sheet: Start Date, End Date, Price Elec/Gaz/Eau/Air
"""

import io
import logging
import re
from typing import Dict, List, Optional, Tuple

import pandas as pd
import gspread
from google.auth.exceptions import GoogleAuthError
from gspread.exceptions import (
    SpreadsheetNotFound,
    WorksheetNotFound,
    APIError,
    NoValidUrlKeyFound
)
from gspread_dataframe import set_with_dataframe

from utils.constants import (
    CANON_HEADERS, HIERARCHY_HEADERS, HIERARCHY_SHEET, NAME_COL, PARENT_COL_PREFIX,
    PRICE_HEADERS, PRICES_SHEET
)
from utils.helpers import coerce_number, drop_blank_names, ensure_columns, normalize_text
from logic.models import Graph, LevelConfig, LevelConfigError

logger = logging.getLogger(__name__)

_PARENT_COL_RE = re.compile(rf"^{re.escape(PARENT_COL_PREFIX)}(\d+)$")

# Long-table uploads (one CSV for every level) carry the level columns inline
LONG_TABLE_LEVEL_HEADERS = ["Level ID", "Level Name", "Order"]


# ===== Google Sheets Authentication =====

def get_gspread_client_from_secrets(secrets_dict: dict) -> gspread.Client:
    """
    Create a gspread client using service account credentials.

    Args:
        secrets_dict: Service account credentials dictionary

    Returns:
        gspread.Client: Authenticated client

    Raises:
        GoogleAuthError: If authentication fails
        ValueError: If required fields are missing
    """
    try:
        from google.oauth2.service_account import Credentials

        SCOPES = [
            "https://www.googleapis.com/auth/spreadsheets",
            "https://www.googleapis.com/auth/drive",
        ]
        credentials = Credentials.from_service_account_info(secrets_dict, scopes=SCOPES)
        return gspread.authorize(credentials)

    except GoogleAuthError as e:
        raise GoogleAuthError(
            "Google Sheets authentication failed. Please check your service account credentials."
        ) from e
    except KeyError as e:
        raise ValueError(
            f"Missing required field in service account: {e}. Please check your configuration."
        ) from e


def open_spreadsheet(client: gspread.Client, spreadsheet_id: str) -> gspread.Spreadsheet:
    """
    Open a Google Spreadsheet by ID.

    Raises:
        SpreadsheetNotFound: If spreadsheet doesn't exist or access is denied
        ValueError: If spreadsheet_id is invalid
    """
    if not spreadsheet_id or len(spreadsheet_id) < 20:
        raise ValueError("Invalid spreadsheet ID format. Please provide a valid Google Sheets URL or ID.")
    try:
        return client.open_by_key(spreadsheet_id)
    except SpreadsheetNotFound:
        raise SpreadsheetNotFound(
            f"Spreadsheet '{spreadsheet_id}' not found or access denied. "
            "Please check the spreadsheet ID and share it with the service account."
        )
    except NoValidUrlKeyFound:
        raise ValueError(
            f"Invalid spreadsheet ID: '{spreadsheet_id}'. "
            "Please provide a valid Google Sheets URL or ID."
        )


# ===== Worksheet Operations =====

def read_worksheet_with_canonical_headers(
    spreadsheet: gspread.Spreadsheet,
    title: str,
    canonical_headers: List[str]
) -> pd.DataFrame:
    """
    Read a worksheet into a DataFrame, guaranteeing the canonical headers.

    Extra columns (e.g. Parent L0, Parent L1) are kept after the canonical ones.

    Raises:
        WorksheetNotFound: If worksheet doesn't exist
        APIError: If unable to read worksheet data
    """
    try:
        worksheet = spreadsheet.worksheet(title)
        values = worksheet.get_all_values()
    except WorksheetNotFound:
        raise WorksheetNotFound(f"Worksheet '{title}' not found in the spreadsheet.")
    except APIError as e:
        raise APIError(
            f"Unable to read worksheet '{title}'. Please check your permissions."
        ) from e

    if not values:
        return pd.DataFrame(columns=canonical_headers)

    header = [normalize_text(c) for c in values[0]]
    df = pd.DataFrame(values[1:], columns=header)
    df = ensure_columns(df, canonical_headers)
    extra = [c for c in df.columns if c not in canonical_headers and c]
    return df[list(canonical_headers) + extra]


def read_google_workbook(spreadsheet_id: str, secrets_dict: dict) -> Dict[str, pd.DataFrame]:
    """
    Read the hierarchy sheet, every level sheet it references and the price sheet.

    Returns:
        Dict[str, pd.DataFrame]: Workbook keyed by sheet title; empty on failure
    """
    try:
        client = get_gspread_client_from_secrets(secrets_dict)
        spreadsheet = open_spreadsheet(client, spreadsheet_id)

        wb: Dict[str, pd.DataFrame] = {}
        hierarchy = read_worksheet_with_canonical_headers(spreadsheet, HIERARCHY_SHEET, HIERARCHY_HEADERS)
        wb[HIERARCHY_SHEET] = hierarchy

        for _, row in hierarchy.iterrows():
            sheet = normalize_text(row.get("Sheet")) or normalize_text(row.get("Level ID"))
            if sheet and sheet not in wb:
                wb[sheet] = read_worksheet_with_canonical_headers(spreadsheet, sheet, CANON_HEADERS)

        try:
            wb[PRICES_SHEET] = read_worksheet_with_canonical_headers(spreadsheet, PRICES_SHEET, PRICE_HEADERS)
        except WorksheetNotFound:
            logger.info("No price sheet in the spreadsheet")

        return wb

    except Exception as e:
        logger.error(f"Failed to read Google workbook '{spreadsheet_id}': {e}")
        return {}


# ===== Upload =====

def workbook_from_long_table(df: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """
    Split a single table holding every level (Level ID, Level Name, Order plus
    the record columns) into the hierarchy sheet and one sheet per level.
    """
    df = ensure_columns(df, LONG_TABLE_LEVEL_HEADERS + CANON_HEADERS)
    df["Level ID"] = df["Level ID"].map(normalize_text)
    df = df[df["Level ID"] != ""]

    wb: Dict[str, pd.DataFrame] = {}
    hierarchy_rows = []
    for level_id, group in df.groupby("Level ID", sort=False):
        first = group.iloc[0]
        hierarchy_rows.append({
            "Level ID": level_id,
            "Level Name": normalize_text(first["Level Name"]) or level_id,
            "Order": first["Order"],
            "Sheet": level_id,
        })
        wb[level_id] = group.drop(columns=LONG_TABLE_LEVEL_HEADERS).reset_index(drop=True)
    wb[HIERARCHY_SHEET] = pd.DataFrame(hierarchy_rows, columns=HIERARCHY_HEADERS)
    return wb


def read_uploaded_workbook(file) -> Dict[str, pd.DataFrame]:
    """
    Read an uploaded XLSX (one sheet per level plus Hierarchy) or a long-table CSV.

    Args:
        file: Uploaded file object exposing ``name``

    Returns:
        Dict[str, pd.DataFrame]: Workbook keyed by sheet name
    """
    if file.name.lower().endswith(".csv"):
        return workbook_from_long_table(pd.read_csv(file))

    xls = pd.ExcelFile(file)
    sheets: Dict[str, pd.DataFrame] = {}
    for name in xls.sheet_names:
        dfx = xls.parse(name)
        dfx.columns = [normalize_text(c) for c in dfx.columns]
        sheets[normalize_text(name)] = dfx
    return sheets


# ===== Workbook -> LevelConfig =====

def _parent_columns(df: pd.DataFrame) -> Dict[int, str]:
    out: Dict[int, str] = {}
    for col in df.columns:
        match = _PARENT_COL_RE.match(normalize_text(col))
        if match:
            out[int(match.group(1))] = col
    return out


def levels_from_workbook(wb: Dict[str, pd.DataFrame]) -> List[LevelConfig]:
    """
    Build one LevelConfig per row of the hierarchy sheet.

    Level sheets that are missing yield a level with no records (not yet
    loaded) rather than an error.

    Raises:
        LevelConfigError: If the hierarchy sheet is missing or an order is not an integer
    """
    if not wb or HIERARCHY_SHEET not in wb:
        raise LevelConfigError(f"Workbook has no '{HIERARCHY_SHEET}' sheet")

    hierarchy = ensure_columns(wb[HIERARCHY_SHEET], HIERARCHY_HEADERS)
    levels: List[LevelConfig] = []
    for _, row in hierarchy.iterrows():
        level_id = normalize_text(row["Level ID"])
        if not level_id:
            continue
        order = coerce_number(row["Order"])
        if order is None or order != int(order):
            raise LevelConfigError(f"Level '{level_id}' has an invalid order: {row['Order']!r}")

        sheet = normalize_text(row["Sheet"]) or level_id
        records = wb.get(sheet)
        if records is None:
            logger.warning(f"Sheet '{sheet}' for level '{level_id}' is missing; level has no records")
            records = pd.DataFrame(columns=CANON_HEADERS)
        records = drop_blank_names(ensure_columns(records, CANON_HEADERS), NAME_COL)

        levels.append(LevelConfig(
            level_id=level_id,
            level_name=normalize_text(row["Level Name"]) or level_id,
            order=int(order),
            records=records.reset_index(drop=True),
            parent_columns=_parent_columns(records),
        ))
    logger.info(f"Loaded {len(levels)} level(s) from workbook")
    return levels


def prices_from_workbook(wb: Dict[str, pd.DataFrame]) -> Optional[pd.DataFrame]:
    """Price table of the workbook, or None when it has none."""
    prices = (wb or {}).get(PRICES_SHEET)
    if not isinstance(prices, pd.DataFrame) or prices.empty:
        return None
    return ensure_columns(prices, PRICE_HEADERS)


# ===== Graph Export =====

def graph_to_frames(graph: Optional[Graph]) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Nodes and links of a graph as two DataFrames."""
    node_cols = ["id", "name", "value", "level", "level_id", "category"]
    link_cols = ["source", "target", "value"]
    if graph is None:
        return pd.DataFrame(columns=node_cols), pd.DataFrame(columns=link_cols)
    nodes = pd.DataFrame(
        [
            {
                "id": n.id,
                "name": n.name,
                "value": n.value,
                "level": n.level,
                "level_id": n.level_id,
                "category": n.category.value if n.category is not None else "",
            }
            for n in graph.nodes
        ],
        columns=node_cols,
    )
    links = pd.DataFrame(
        [{"source": l.source, "target": l.target, "value": l.value} for l in graph.links],
        columns=link_cols,
    )
    return nodes, links


def export_dataframe_to_csv_bytes(df: pd.DataFrame) -> bytes:
    """Export DataFrame to CSV bytes."""
    return df.to_csv(index=False).encode("utf-8")


def export_graph_to_excel_bytes(graph: Optional[Graph]) -> bytes:
    """
    Export a graph to an Excel workbook with a Nodes and a Links sheet.

    Returns:
        bytes: Excel file as bytes
    """
    nodes, links = graph_to_frames(graph)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        nodes.to_excel(writer, index=False, sheet_name="Nodes")
        links.to_excel(writer, index=False, sheet_name="Links")
    return buffer.getvalue()


def push_graph_to_google_sheets(
    spreadsheet_id: str,
    graph: Graph,
    secrets_dict: dict,
    *,
    title_prefix: str = "Sankey"
) -> bool:
    """
    Write the graph's nodes and links to two worksheets, replacing their content.

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        client = get_gspread_client_from_secrets(secrets_dict)
        spreadsheet = open_spreadsheet(client, spreadsheet_id)
        nodes, links = graph_to_frames(graph)
        for suffix, df in (("Nodes", nodes), ("Links", links)):
            title = f"{title_prefix} {suffix}"
            try:
                worksheet = spreadsheet.worksheet(title)
                worksheet.clear()
            except WorksheetNotFound:
                worksheet = spreadsheet.add_worksheet(
                    title=title, rows=max(len(df) + 1, 100), cols=max(len(df.columns), 8)
                )
            set_with_dataframe(worksheet, df, include_index=False, include_column_header=True)
        return True

    except Exception as e:
        logger.error(f"Failed to push graph to Google Sheets: {e}")
        return False
