from .orders import JobGroup, Job, JobStatus, PaymentStatus, ColorMode, Sides
from .summaries import DailySummary
from .system import SystemStatus

__all__ = [
    'JobGroup', 'Job', 'JobStatus', 'PaymentStatus', 'ColorMode', 'Sides',
    'DailySummary',
    'SystemStatus',
]
