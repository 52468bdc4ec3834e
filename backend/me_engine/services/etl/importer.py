from dataclasses import dataclass, field
from pathlib import Path

from me_engine.core.config import settings
from me_engine.core.logging import logger
from me_engine.services.engine import MEEngine
from me_engine.services.etl.parsers.daily_logs import parse_daily_log_rows
from me_engine.services.validators import ValidationError


@dataclass
class ImportSummary:
    rows_read: int = 0
    rows_added: int = 0
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def status(self) -> str:
        return "success" if not self.errors else "success_with_errors"


def import_daily_logs(engine: MEEngine, path: str | Path, sheet: str | None = None, created_by: str = "import") -> ImportSummary:
    sheet = sheet or settings.DAILY_LOG_SHEET
    rows, errors = parse_daily_log_rows(str(path), engine.project_id, sheet=sheet, created_by=created_by)
    summary = ImportSummary(rows_read=len(rows) + len(errors), errors=list(errors))
    if rows:
        # one batch, one recompute; errors point at sheet rows like the parser's
        added, add_errors = engine.add_observations([d for _, d in rows], row_nums=[n for n, _ in rows])
        for err in add_errors:
            err.sheet = sheet
        summary.rows_added = len(added)
        summary.errors.extend(add_errors)
    logger.info(
        "import_finished",
        project_id=engine.project_id,
        path=str(path),
        status=summary.status,
        rows_loaded=summary.rows_added,
        errors=len(summary.errors),
    )
    return summary
