import datetime as dt
from pathlib import Path
from typing import Sequence

import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from me_engine.core.config import settings
from me_engine.core.logging import logger
from me_engine.schemas.observations import DailyObservation
from me_engine.schemas.reports import AggregatedSummary, MEMetrics, ProgressVariance
from me_engine.schemas.rollups import Rollup
from me_engine.services.engine import MEEngine

LIST_SEP = "; "


def observations_frame(observations: Sequence[DailyObservation]) -> pd.DataFrame:
    rows = [
        {
            "Date": o.date,
            "Physical Progress (%)": o.physical_progress,
            "Financial Progress (%)": o.financial_progress,
            "Accomplishments": LIST_SEP.join(o.accomplishments),
            "Issues": LIST_SEP.join(o.issues),
            "Weather": o.weather,
            "Labor Count": o.labor_count,
            "Equipment Status": o.equipment_status,
            "Notes": o.notes or "",
            "Created By": o.created_by,
        }
        for o in observations
    ]
    return pd.DataFrame(rows)


def rollups_frame(rollups: Sequence[Rollup]) -> pd.DataFrame:
    if not rollups:
        return pd.DataFrame()
    # nested blocks become dotted columns, e.g. kpis.onTimePerformance
    df = pd.json_normalize([r.dump() for r in rollups])
    for col in ("dailyLogIds", "weeklyRollupIds", "monthlyRollupIds"):
        if col in df.columns:
            df[col] = df[col].apply(LIST_SEP.join)
    return df


def variance_frame(variances: Sequence[ProgressVariance]) -> pd.DataFrame:
    return pd.DataFrame([v.dump() for v in variances])


def export_me_xlsx(engine: MEEngine, out_path: Path) -> Path:
    sheets = {
        "daily_logs": observations_frame(engine.list_observations()),
        "weekly": rollups_frame(engine.list_rollups("weekly")),
        "monthly": rollups_frame(engine.list_rollups("monthly")),
        "quarterly": rollups_frame(engine.list_rollups("quarterly")),
        "variance": variance_frame(engine.get_variance()),
    }
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="xlsxwriter") as w:
        for name, df in sheets.items():
            df.to_excel(w, index=False, sheet_name=name)
    logger.info("export_written", project_id=engine.project_id, path=str(out_path), format="xlsx")
    return out_path


def export_csv(df: pd.DataFrame, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path, index=False)
    logger.info("export_written", path=str(out_path), format="csv", rows=len(df))
    return out_path


def export_summary_pdf(project_id: str, metrics: MEMetrics, summary: AggregatedSummary | None, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(out_path), pagesize=A4)
    width, height = A4
    y = height - 20*mm
    c.setFont("Helvetica-Bold", 14)
    c.drawString(20*mm, y, "M&E Summary Report")
    y -= 10*mm
    c.setFont("Helvetica", 11)
    lines = [
        f"Project ID: {project_id}",
        f"Total daily logs: {metrics.total_logs}",
        f"Avg daily progress: {metrics.avg_daily_progress:.2f} %",
        f"Current variance: {metrics.current_variance:.2f} %",
        f"Trend: {metrics.trend_direction}",
        f"Last updated: {metrics.last_updated.isoformat()}" if metrics.last_updated else "Last updated: —",
    ]
    if summary is not None:
        lines += [
            f"Selection: {summary.period_label}",
            f"Avg physical progress: {summary.avg_physical_progress:.2f} %",
            f"Avg financial progress: {summary.avg_financial_progress:.2f} %",
            f"Accomplishments: {summary.total_accomplishments}",
            f"Issues: {summary.total_issues}",
            f"Overall variance: {summary.overall_variance:.2f} %",
        ]
    for ln in lines:
        c.drawString(20*mm, y, ln)
        y -= 7*mm
    c.showPage()
    c.save()
    logger.info("export_written", project_id=project_id, path=str(out_path), format="pdf")
    return out_path


def default_export_path(prefix: str, ext: str) -> Path:
    ts = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%d_%H%M%S")
    return Path(settings.EXPORT_DIR) / f"{prefix}_{ts}.{ext}"
