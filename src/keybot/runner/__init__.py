from .base import JobRunner
from .client import RunnerClient

__all__ = ["JobRunner", "RunnerClient"]
