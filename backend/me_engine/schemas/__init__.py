from me_engine.schemas.observations import DailyObservation, ObservationDraft, ObservationPatch
from me_engine.schemas.rollups import WeeklyRollup, MonthlyRollup, QuarterlyRollup, RollupSnapshot
from me_engine.schemas.reports import MEFilter, AggregatedData, ProgressVariance, MEMetrics
