from fastapi import APIRouter
from backend import metrics

router = APIRouter(tags=["metrics"])


@router.get("/api/metrics")
def get_metrics():
    """Return current in-memory operation counters."""
    return metrics.get_all()
