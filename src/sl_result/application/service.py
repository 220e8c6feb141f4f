"""ResultApplicationService: result rows and bulk ingestion of their lines.

Ingestion posts one transaction per parsed, resolved line against the
(user, category) balance of the result's target kind, tagged
source=RESULT and result_id. Editing a result reverses and deletes every
transaction it posted before re-ingesting the new text; deleting a result
reverses them too. Each operation is one database transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.change_feed import (
    ChangeFeedProtocol,
    Delete,
    Insert,
    Update,
    as_row,
    get_change_feed,
    publish_changes,
)
from src.sl_common.database import unit_of_work
from src.sl_common.enums import TransactionSource
from src.sl_common.errors import ResultNotFoundError
from src.sl_ledger.application.ledger import Changes, LedgerService
from src.sl_ledger.domain.models import TransactionDraft
from src.sl_ledger.domain.repository import TransactionRepositoryProtocol
from src.sl_ledger.infrastructure.persistence import TransactionRepository
from src.sl_result.application.schemas import CreateResultRequest, UpdateResultRequest
from src.sl_result.domain.models import (
    SKIP_UNKNOWN_USER,
    IngestedLine,
    IngestionReport,
    ParsedLine,
    Result,
    SkippedLine,
)
from src.sl_result.domain.parser import parse_result_lines, resolve_username
from src.sl_result.domain.repository import ResultRepositoryProtocol
from src.sl_result.infrastructure.persistence import ResultRepository

logger = logging.getLogger(__name__)

RESULTS_TABLE = "results"


class ResultApplicationService:
    def __init__(
        self,
        repo: ResultRepositoryProtocol | None = None,
        transactions: TransactionRepositoryProtocol | None = None,
        ledger: LedgerService | None = None,
        feed: ChangeFeedProtocol | None = None,
    ) -> None:
        self._repo: ResultRepositoryProtocol = repo or ResultRepository()
        self._transactions: TransactionRepositoryProtocol = transactions or TransactionRepository()
        self._ledger = ledger or LedgerService(transactions=self._transactions)
        self._feed = feed

    @property
    def feed(self) -> ChangeFeedProtocol:
        return self._feed or get_change_feed()

    async def list_results(
        self, db: AsyncSession, category_id: str | None = None
    ) -> list[Result]:
        return await self._repo.list_results(db, category_id)

    async def get_result(self, db: AsyncSession, result_id: str) -> Result:
        result = await self._repo.get_result(db, result_id)
        if result is None:
            raise ResultNotFoundError(result_id)
        return result

    async def preview_result(self, db: AsyncSession, text: str) -> IngestionReport:
        """Parse and resolve without writing anything."""
        report = IngestionReport()
        for line, user_id in await self._resolve(db, text, report):
            report.ingested.append(
                IngestedLine(line.line_no, line.username, user_id, line.amount, line.type)
            )
        return report

    async def add_result(
        self, db: AsyncSession, body: CreateResultRequest
    ) -> tuple[Result, IngestionReport]:
        draft = Result(
            id="",
            category_id=body.category_id,
            target=body.target,
            result=body.result,
            status=body.status,
        )
        async with unit_of_work(db):
            result = await self._repo.insert_result(db, draft)
            changes: Changes = [(RESULTS_TABLE, Insert(as_row(result)))]
            report = await self._ingest(db, result, changes)

        self._log_report("added", result, report)
        await publish_changes(self.feed, changes)
        return result, report

    async def update_result(
        self, db: AsyncSession, result_id: str, body: UpdateResultRequest
    ) -> tuple[Result, IngestionReport]:
        """Full replace: reverse every transaction of the result, then re-ingest."""
        changes: Changes = []
        async with unit_of_work(db):
            current = await self._locked(db, result_id)
            reversed_count = await self._reverse_all(db, result_id, changes)

            if body.category_id is not None:
                current.category_id = body.category_id
            if body.target is not None:
                current.target = body.target
            if body.result is not None:
                current.result = body.result
            if body.status is not None:
                current.status = body.status
            result = await self._repo.update_result(db, current)
            if result is None:
                raise ResultNotFoundError(result_id)
            changes.append((RESULTS_TABLE, Update(as_row(result))))

            report = await self._ingest(db, result, changes)
            report.reversed_count = reversed_count

        self._log_report("updated", result, report)
        await publish_changes(self.feed, changes)
        return result, report

    async def delete_result(self, db: AsyncSession, result_id: str) -> int:
        """Returns how many transactions were reversed."""
        changes: Changes = []
        async with unit_of_work(db):
            await self._locked(db, result_id)
            reversed_count = await self._reverse_all(db, result_id, changes)
            if not await self._repo.delete_result(db, result_id):
                raise ResultNotFoundError(result_id)
            changes.append((RESULTS_TABLE, Delete(result_id)))

        logger.info("Result deleted: id=%s reversed=%d", result_id, reversed_count)
        await publish_changes(self.feed, changes)
        return reversed_count

    # ------------------------------------------------------------------

    async def _locked(self, db: AsyncSession, result_id: str) -> Result:
        result = await self._repo.get_result(db, result_id, for_update=True)
        if result is None:
            raise ResultNotFoundError(result_id)
        return result

    async def _reverse_all(self, db: AsyncSession, result_id: str, changes: Changes) -> int:
        transactions = await self._transactions.list_by_result(db, result_id)
        for tx in transactions:
            changes.extend(await self._ledger.reverse(db, tx))
        return len(transactions)

    async def _resolve(
        self, db: AsyncSession, text: str, report: IngestionReport
    ) -> list[tuple[ParsedLine, str]]:
        parsed, skipped = parse_result_lines(text)
        report.skipped.extend(skipped)

        candidates = await self._repo.find_users(db, [line.username for line in parsed])
        resolved: list[tuple[ParsedLine, str]] = []
        for line in parsed:
            user = resolve_username(line.username, candidates)
            if user is None:
                report.skipped.append(SkippedLine(line.line_no, line.raw, SKIP_UNKNOWN_USER))
                continue
            resolved.append((line, user.id))

        report.skipped.sort(key=lambda s: s.line_no)
        return resolved

    async def _ingest(
        self, db: AsyncSession, result: Result, changes: Changes
    ) -> IngestionReport:
        report = IngestionReport()
        for line, user_id in await self._resolve(db, result.result, report):
            tx, post_changes = await self._ledger.post(
                db,
                TransactionDraft(
                    user_id=user_id,
                    category_id=result.category_id,
                    amount=line.amount,
                    type=line.type,
                    target=result.target,
                    source=TransactionSource.RESULT,
                    result_id=result.id,
                ),
            )
            changes.extend(post_changes)
            report.ingested.append(
                IngestedLine(line.line_no, line.username, user_id, line.amount, line.type, tx.id)
            )
        return report

    def _log_report(self, action: str, result: Result, report: IngestionReport) -> None:
        logger.info(
            "Result %s: id=%s ingested=%d skipped=%d reversed=%d",
            action, result.id, len(report.ingested), len(report.skipped), report.reversed_count,
        )
        for skipped in report.skipped:
            logger.warning(
                "Result %s line %d skipped (%s): %r",
                result.id, skipped.line_no, skipped.reason, skipped.raw,
            )
