"""Pydantic schemas for sl_result API."""

from pydantic import BaseModel, Field

from src.sl_common.amount import quantize
from src.sl_common.enums import BalanceKind, ResultStatus
from src.sl_result.domain.models import IngestionReport, Result


class CreateResultRequest(BaseModel):
    category_id: str
    target: BalanceKind = BalanceKind.ACCOUNT_BALANCE
    result: str = Field(..., description='One "<amount> <username>" per line')
    status: ResultStatus = ResultStatus.PENDING


class UpdateResultRequest(BaseModel):
    category_id: str | None = None
    target: BalanceKind | None = None
    result: str | None = None
    status: ResultStatus | None = None


class PreviewResultRequest(BaseModel):
    result: str


class ResultResponse(BaseModel):
    id: str
    category_id: str
    target: str
    result: str
    status: str
    created_at: str | None

    @classmethod
    def from_domain(cls, result: Result) -> "ResultResponse":
        return cls(
            id=result.id,
            category_id=result.category_id,
            target=result.target.value,
            result=result.result,
            status=result.status.value,
            created_at=result.created_at.isoformat() if result.created_at else None,
        )


class IngestedLineItem(BaseModel):
    line_no: int
    username: str
    user_id: str
    amount: str
    type: str
    transaction_id: str | None


class SkippedLineItem(BaseModel):
    line_no: int
    raw: str
    reason: str


class IngestionReportResponse(BaseModel):
    ingested: list[IngestedLineItem]
    skipped: list[SkippedLineItem]
    ingested_count: int
    skipped_count: int
    unresolved_count: int
    reversed_count: int

    @classmethod
    def from_domain(cls, report: IngestionReport) -> "IngestionReportResponse":
        return cls(
            ingested=[
                IngestedLineItem(
                    line_no=line.line_no,
                    username=line.username,
                    user_id=line.user_id,
                    amount=str(quantize(line.amount)),
                    type=line.type.value,
                    transaction_id=line.transaction_id,
                )
                for line in report.ingested
            ],
            skipped=[
                SkippedLineItem(line_no=s.line_no, raw=s.raw, reason=s.reason)
                for s in report.skipped
            ],
            ingested_count=len(report.ingested),
            skipped_count=len(report.skipped),
            unresolved_count=len(report.unresolved),
            reversed_count=report.reversed_count,
        )
