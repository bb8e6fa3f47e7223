"""Mini README: Daily and monthly aggregation for Fleet Ledger.

``daily`` owns the persisted per-date rollup, ``monthly`` the on-demand month
view with its leaderboards, and ``ranking`` the sorting and windowing rules
both share.
"""

from .daily import DailyReport, DailyRollup, DailyStatistics, DailyVehicleLine
from .monthly import (
    AverageTurnEntry,
    MonthlyRollup,
    MonthlyStatistics,
    RevenueMatrix,
    RewardPenaltyEntry,
    TurnObservation,
    VehicleMonthDetail,
    VehicleMonthlySummary,
)
from .ranking import RankingRow, window

__all__ = [
    "AverageTurnEntry",
    "DailyReport",
    "DailyRollup",
    "DailyStatistics",
    "DailyVehicleLine",
    "MonthlyRollup",
    "MonthlyStatistics",
    "RankingRow",
    "RevenueMatrix",
    "RewardPenaltyEntry",
    "TurnObservation",
    "VehicleMonthDetail",
    "VehicleMonthlySummary",
    "window",
]
