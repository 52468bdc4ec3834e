from me_engine.core.config import settings
from me_engine.core.logging import configure_logging, logger
from me_engine.core.providers import QualitySignal
from me_engine.services.engine import MEEngine

def create_me_engine(project_id: str, total_budget: float | None = None, quality: QualitySignal | None = None) -> MEEngine:
    configure_logging(settings.ENV, settings.LOG_LEVEL)
    engine = MEEngine(project_id, total_budget=total_budget, quality=quality)
    logger.info("engine_started", env=settings.ENV, project_id=project_id, week_range_mode=engine.calculator.week_range_mode)
    return engine
