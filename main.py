from fastapi import FastAPI, File, UploadFile
import os
import logging
from datetime import datetime
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

import config
from presentation import build_table_view
from schemas import RawSheet, TableView, TableViewRequest
from sheet_parser import SheetParser
from sheet_transform import SheetTransformError, columns_from_header, records_from_sheet_data
from table_engine import validate_records


# Create logs directory if it doesn't exist
os.makedirs(config.LOG_DIR, exist_ok=True)

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Add file handler to write logs to file
log_file_path = os.path.join(config.LOG_DIR, f"app_{datetime.now().strftime('%Y%m%d')}.log")
file_handler = logging.FileHandler(log_file_path)
file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
logging.getLogger().addHandler(file_handler)


# Initialize FastAPI app with metadata
app = FastAPI(
    title="Excel Viewer API",
    description="API for uploading spreadsheets and viewing them as filterable, sortable tables",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# API Endpoints
@app.get("/health", tags=["Service"])
async def health():
    return {"status": "ok"}


@app.post(
    "/upload",
    tags=["Excel Viewer"],
    response_model=RawSheet,
    response_model_by_alias=True
)
async def upload_spreadsheet(file: UploadFile = File(...)):
    """
    Parse an uploaded .xlsx/.xls file.

    The first sheet is returned as a header row followed by data rows.

    Returns:
        dict: JSON response with:
            - sheetName: Name of the first sheet
            - numOfSheets: Number of sheets in the workbook
            - sheetData: 2D array of cell values, header row first
    """
    logger.info(f"Received upload: {file.filename}")
    content = await file.read()

    result = SheetParser.parse_upload(file.filename, content)

    # Single exit point for failures
    if result.is_failure():
        return JSONResponse(status_code=result.status_code.value, content=result.to_dict())
    return result.data


@app.post("/table/view", tags=["Excel Viewer"], response_model=TableView)
async def table_view(request: TableViewRequest):
    """
    Filter, sort and render sheet data for display.

    Accepts the ``sheetData`` of a RawSheet and the table state (global filter,
    column filters, sort) and returns the rows to show, already rendered:
    links as "Open Link", serial numbers in date columns as dates.
    """
    try:
        records = records_from_sheet_data(request.sheet_data)
        columns = columns_from_header(request.sheet_data)
    except SheetTransformError as e:
        logger.warning(f"Rejected sheet data: {str(e)}")
        return JSONResponse(status_code=422, content={"error": f"Data processing error: {str(e)}"})

    issues = validate_records(records, columns)
    view = build_table_view(records, request.state, columns, issues, config.DATE_FORMAT)
    logger.info(f"Serving table view with {view.visible_records} of {view.total_records} rows")
    return view


# Run the application if executed directly
if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Excel Viewer API in development mode.")
    uvicorn.run("main:app", host=config.API_HOST, port=config.API_PORT, reload=True)
