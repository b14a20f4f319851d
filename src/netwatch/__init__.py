"""Host health watchdog: resource, integrity, reachability and liveness checks with throttled alerts."""

__version__ = "1.0.0"
