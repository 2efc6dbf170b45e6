"""
Excel Viewer

Upload an .xlsx/.xls file and browse its first sheet as a sortable,
filterable table.

Key modules:
- main.py: FastAPI application with the upload and table-view endpoints
- sheet_parser.py: Reads uploaded workbooks into raw sheet rows
- sheet_transform.py: Turns raw sheet rows into records keyed by header
- table_engine.py: Global/column filtering and cyclic single-column sorting
- cell_renderer.py: Link and Excel serial date display rules
- presentation.py: Rendered table views and their HTML form
- upload_client.py: HTTP client for the upload endpoint
- viewer_session.py: Upload -> records -> table state lifecycle
- preferences.py: Persisted dark/light theme
- viewer_app.py: Streamlit frontend
- utils/result.py: Result pattern implementation for error handling
"""
