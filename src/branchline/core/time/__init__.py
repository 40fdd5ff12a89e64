from branchline.core.time.abc import Time
from branchline.core.time.real import RealTime

__all__ = [
    "RealTime",
    "Time",
]
