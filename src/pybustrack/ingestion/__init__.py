"""Ingestion layer.

Adapters that receive fleet data (REST roster, realtime channel) and emit
normalized :class:`pybustrack.state.events.FleetUpdate` events.
"""

__all__: list[str] = []
