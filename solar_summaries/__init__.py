"""
Solar summaries service.

Rolls inverter telemetry up into daily and monthly summaries and serves
the admin API of the monitoring dashboard.
"""

__version__ = "1.0.0"
