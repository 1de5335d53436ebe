from .stats_client import StatsClient

__all__ = ["StatsClient"]
