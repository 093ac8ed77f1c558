from .job_client import JobClient, QueryJobResult
from .cursor import ResultCursor

__all__ = [
    "JobClient",
    "QueryJobResult",
    "ResultCursor",
]
