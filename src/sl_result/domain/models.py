"""Domain models for sl_result: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.sl_common.enums import BalanceKind, ResultStatus, TransactionType


@dataclass
class Result:
    """A pasted block of "<amount> <username>" lines for one category."""

    id: str
    category_id: str
    target: BalanceKind
    result: str
    status: ResultStatus = ResultStatus.PENDING
    created_at: datetime | None = None


@dataclass(frozen=True)
class ParsedLine:
    line_no: int          # 1-based, counting blank lines
    raw: str
    username: str
    amount: Decimal       # stored amount, sign already flipped
    type: TransactionType


@dataclass(frozen=True)
class SkippedLine:
    line_no: int
    raw: str
    reason: str


@dataclass(frozen=True)
class UserRef:
    id: str
    email: str

    @property
    def local_part(self) -> str:
        return self.email.split("@", 1)[0]


@dataclass
class IngestedLine:
    line_no: int
    username: str
    user_id: str
    amount: Decimal
    type: TransactionType
    transaction_id: str | None = None   # None in a preview


@dataclass
class IngestionReport:
    ingested: list[IngestedLine] = field(default_factory=list)
    skipped: list[SkippedLine] = field(default_factory=list)
    reversed_count: int = 0

    @property
    def unresolved(self) -> list[SkippedLine]:
        return [s for s in self.skipped if s.reason == SKIP_UNKNOWN_USER]


SKIP_MISSING_TOKEN = "missing amount or username"
SKIP_BAD_AMOUNT = "amount is not a number"
SKIP_UNKNOWN_USER = "username not found"
