"""Result text parsing and username resolution: pure functions.

One "<amount> <username>" per line. Tokens past the second are ignored;
a line that is short a token or whose amount is not a number is skipped
and reported, never raised.

The stored amount is the literal negated, and the literal's leading "-"
decides the type:

    "10 alice"  -> amount -10, debit
    "-5 bob"    -> amount   5, credit
"""

from src.sl_common.amount import parse_amount, quantize
from src.sl_common.enums import TransactionType
from src.sl_result.domain.models import (
    SKIP_BAD_AMOUNT,
    SKIP_MISSING_TOKEN,
    ParsedLine,
    SkippedLine,
    UserRef,
)


def parse_result_lines(text: str) -> tuple[list[ParsedLine], list[SkippedLine]]:
    parsed: list[ParsedLine] = []
    skipped: list[SkippedLine] = []

    for line_no, raw in enumerate(text.splitlines(), start=1):
        tokens = raw.split()
        if not tokens:
            continue  # blank lines are not worth reporting
        if len(tokens) < 2:
            skipped.append(SkippedLine(line_no, raw, SKIP_MISSING_TOKEN))
            continue

        literal, username = tokens[0], tokens[1]
        value = parse_amount(literal)
        if value is None:
            skipped.append(SkippedLine(line_no, raw, SKIP_BAD_AMOUNT))
            continue

        parsed.append(
            ParsedLine(
                line_no=line_no,
                raw=raw,
                username=username,
                amount=quantize(-value),
                type=TransactionType.CREDIT if literal.startswith("-") else TransactionType.DEBIT,
            )
        )

    return parsed, skipped


def resolve_username(username: str, candidates: list[UserRef]) -> UserRef | None:
    """Pick the user a result line refers to.

    An exact, case-insensitive email local part wins when it is unique; a
    full email match is the fallback. Anything else is unresolved.
    """
    wanted = username.lower()
    by_local = [u for u in candidates if u.local_part.lower() == wanted]
    if len(by_local) == 1:
        return by_local[0]
    by_email = [u for u in candidates if u.email.lower() == wanted]
    if len(by_email) == 1:
        return by_email[0]
    return None
