import pandas as pd
import pydantic

from me_engine.core.config import settings
from me_engine.schemas.observations import ObservationDraft
from me_engine.services.etl.utils import norm_str, split_notes, to_date, to_float
from me_engine.services.validators import ValidationError, from_pydantic

# sheet header label -> draft field; the exporter writes the same labels
DAILY_LOG_COLUMNS = {
    "Date": "date",
    "Physical Progress (%)": "physical_progress",
    "Financial Progress (%)": "financial_progress",
    "Accomplishments": "accomplishments",
    "Issues": "issues",
    "Weather": "weather",
    "Labor Count": "labor_count",
    "Equipment Status": "equipment_status",
    "Notes": "notes",
    "Created By": "created_by",
}
REQUIRED_COLUMNS = ("Date", "Physical Progress (%)", "Financial Progress (%)")


def _row_to_values(row: dict, project_id: str, created_by: str) -> dict:
    labor = to_float(row.get("Labor Count"), 0.0)
    return dict(
        project_id=project_id,
        date=to_date(row.get("Date")) or norm_str(row.get("Date")),
        physical_progress=to_float(row.get("Physical Progress (%)")),
        financial_progress=to_float(row.get("Financial Progress (%)")),
        accomplishments=split_notes(row.get("Accomplishments")),
        issues=split_notes(row.get("Issues")),
        weather=(norm_str(row.get("Weather")) or "").lower() or None,
        labor_count=int(labor) if labor is not None and float(labor).is_integer() else labor,
        equipment_status=(norm_str(row.get("Equipment Status")) or "").lower() or None,
        notes=norm_str(row.get("Notes")),
        created_by=norm_str(row.get("Created By")) or created_by,
    )


def parse_daily_log_rows(
    path: str, project_id: str, sheet: str | None = None, created_by: str = "import"
) -> tuple[list[tuple[int, ObservationDraft]], list[ValidationError]]:
    """Like `parse_daily_logs`, keeping the sheet row number of each draft."""
    sheet = sheet or settings.DAILY_LOG_SHEET
    errors: list[ValidationError] = []
    try:
        df = pd.read_excel(path, sheet_name=sheet, header=0, engine="openpyxl")
    except ValueError:
        errors.append(ValidationError(f"Sheet '{sheet}' not found", sheet=sheet))
        return [], errors
    df.columns = [str(c).replace("\n", " ").strip() if c is not None else "" for c in df.columns]

    for c in REQUIRED_COLUMNS:
        if c not in df.columns:
            errors.append(ValidationError(f"Column '{c}' not found", sheet=sheet, field=DAILY_LOG_COLUMNS[c]))
    if errors:
        return [], errors

    rows: list[tuple[int, ObservationDraft]] = []
    # header is row 1 in the sheet
    for row_num, row in enumerate(df.to_dict("records"), start=2):
        if all(norm_str(row.get(c)) is None for c in REQUIRED_COLUMNS):
            continue
        try:
            rows.append((row_num, ObservationDraft.model_validate(_row_to_values(row, project_id, created_by))))
        except pydantic.ValidationError as e:
            err = from_pydantic(e)
            err.sheet = sheet
            err.row_num = row_num
            errors.append(err)
    return rows, errors


def parse_daily_logs(
    path: str, project_id: str, sheet: str | None = None, created_by: str = "import"
) -> tuple[list[ObservationDraft], list[ValidationError]]:
    rows, errors = parse_daily_log_rows(path, project_id, sheet=sheet, created_by=created_by)
    return [d for _, d in rows], errors
