"""
Pytest configuration file.

Puts the project root on the Python path so the flat modules
(main, sheet_parser, table_engine, ...) import by name in tests, and
sends the API's log files to a temporary directory.
"""
import os
import sys
import tempfile

# Add the current directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

os.environ.setdefault("EXCEL_VIEWER_LOG_DIR", os.path.join(tempfile.gettempdir(), "excel_viewer_test_logs"))
