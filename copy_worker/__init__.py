"""Copy-trading execution worker.

Layers:
- domain: Execution job aggregate, risk evaluator, exchange port
- application: ExecuteJob use case (validate → risk → submit → report)
- infrastructure: SQLAlchemy persistence, CCXT/paper exchanges, event bus
- presentation: Celery worker tasks and the FastAPI health/jobs surface
"""

__version__ = "1.0.0"
