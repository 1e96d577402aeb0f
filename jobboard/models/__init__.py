from jobboard.models.admin import Admin
from jobboard.models.analytics import AnalyticsEvent
from jobboard.models.job import Job
from jobboard.models.visitor import Visitor

__all__ = ["Admin", "AnalyticsEvent", "Job", "Visitor"]
