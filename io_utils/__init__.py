# io package
from .sheets import (
    # Google Sheets authentication
    get_gspread_client_from_secrets,
    open_spreadsheet,

    # Reading
    read_worksheet_with_canonical_headers,
    read_google_workbook,
    read_uploaded_workbook,
    workbook_from_long_table,

    # Workbook -> levels
    levels_from_workbook,
    prices_from_workbook,

    # Export
    graph_to_frames,
    export_dataframe_to_csv_bytes,
    export_graph_to_excel_bytes,
    push_graph_to_google_sheets
)

__all__ = [
    'get_gspread_client_from_secrets',
    'open_spreadsheet',
    'read_worksheet_with_canonical_headers',
    'read_google_workbook',
    'read_uploaded_workbook',
    'workbook_from_long_table',
    'levels_from_workbook',
    'prices_from_workbook',
    'graph_to_frames',
    'export_dataframe_to_csv_bytes',
    'export_graph_to_excel_bytes',
    'push_graph_to_google_sheets'
]
