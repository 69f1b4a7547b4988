from .snapshot import PositionSnapshotBuilder, compute_liquidity_share, render_snapshot
from .strategy import RollPipeline
from .types import (
    ROLL_STAGES,
    OnsenAdapters,
    RollAbortedError,
    RollConfig,
    RollReport,
    RollStage,
    StageOutcome,
    StageStatus,
)

__all__ = [
    "ROLL_STAGES",
    "OnsenAdapters",
    "PositionSnapshotBuilder",
    "RollAbortedError",
    "RollConfig",
    "RollPipeline",
    "RollReport",
    "RollStage",
    "StageOutcome",
    "StageStatus",
    "compute_liquidity_share",
    "render_snapshot",
]
