"""Mini README: Income entry for Fleet Ledger.

``records`` holds the value objects and the pure derivation of revenue, net
income and turn count; ``service`` persists records and keeps the daily
rollup in step with every write.
"""

from .records import IncomeInput, IncomeRecord, derive_income_record
from .service import IncomeRecordService

__all__ = ["IncomeInput", "IncomeRecord", "IncomeRecordService", "derive_income_record"]
