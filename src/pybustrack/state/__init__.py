"""State/store layer.

This package is the single source of truth for how roster fetches and
realtime ``buses-updated`` pushes are merged into the local fleet view.
"""

from pybustrack.state.events import FleetUpdate, IngestionSource
from pybustrack.state.store import FleetStore, merge_batch

__all__ = ["FleetStore", "FleetUpdate", "IngestionSource", "merge_batch"]
