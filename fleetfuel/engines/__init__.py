# Import the LifecycleEngine, which opens and closes fuel entries and daily logs
# (one open record per vehicle and kind; distance/mileage computed on close)
from .lifecycle import LifecycleEngine

# Import the StatusHistoryEngine, which registers vehicles and keeps their
# Active/Inactive timeline contiguous
from .status_history import StatusHistoryEngine, period_duration

# Import the AnalyticsEngine, the read-only source of every aggregate
from .analytics import AnalyticsEngine

# Supplier and vehicle bookkeeping around the engines above
from .registry import Registry
