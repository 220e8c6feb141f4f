"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Ledger (balances, bakis, transactions)
  3xxx: Note
  4xxx: Result
  5xxx: Catalog/Post
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid email or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1006, f"User not found: {user_id}", 404)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Admin role required", 403)


class ForbiddenError(AppError):
    def __init__(self, detail: str = "Not allowed") -> None:
        super().__init__(1008, detail, 403)


# --- 2xxx: Ledger ---

class BalanceNotFoundError(AppError):
    def __init__(self, kind: str, balance_id: str | None) -> None:
        super().__init__(2002, f"{kind} not found: {balance_id}", 404)


class BalanceExistsError(AppError):
    def __init__(self, kind: str, user_id: str, category_id: str) -> None:
        super().__init__(
            2003,
            f"{kind} already exists for user {user_id} in category {category_id}",
            409,
        )


class TransactionNotFoundError(AppError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(2004, f"Transaction not found: {transaction_id}", 404)


class InvalidTransactionError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2005, f"Invalid transaction: {detail}", 422)


# --- 3xxx: Note ---

class NoteNotFoundError(AppError):
    def __init__(self, note_id: str) -> None:
        super().__init__(3001, f"Note not found: {note_id}", 404)


class NoteNotPendingError(AppError):
    def __init__(self, note_id: str, status: str) -> None:
        super().__init__(3002, f"Note {note_id} is {status}, expected PENDING", 409)


# --- 4xxx: Result ---

class ResultNotFoundError(AppError):
    def __init__(self, result_id: str) -> None:
        super().__init__(4001, f"Result not found: {result_id}", 404)


# --- 5xxx: Catalog/Post ---

class CategoryNotFoundError(AppError):
    def __init__(self, category_id: str) -> None:
        super().__init__(5001, f"Category not found: {category_id}", 404)


class PostNotFoundError(AppError):
    def __init__(self, post_id: str) -> None:
        super().__init__(5002, f"Post not found: {post_id}", 404)


class PostMediaNotFoundError(AppError):
    def __init__(self, media_id: str) -> None:
        super().__init__(5003, f"Post media not found: {media_id}", 404)


class PostFolderNotFoundError(AppError):
    def __init__(self, folder_id: str) -> None:
        super().__init__(5004, f"Post folder not found: {folder_id}", 404)


class PostFolderMediaNotFoundError(AppError):
    def __init__(self, media_id: str) -> None:
        super().__init__(5005, f"Post folder media not found: {media_id}", 404)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
