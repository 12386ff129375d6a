class BookkeepingError(Exception):
    """Base for every caller-visible bookkeeping failure.

    `code` is stable and safe to hand to an API client;
    the message is for humans.
    """
    code = "bookkeeping_error"

    def __init__(self, message=None):
        super().__init__(message or self.__doc__)
        self.message = str(self)


class DuplicateAccount(BookkeepingError):
    """A ledger with this name or code already exists for the company."""
    code = "duplicate_account"


class InvalidAccountGroup(BookkeepingError):
    """The ledger group is unknown or incompatible with the ledger's nature."""
    code = "invalid_account_group"


class AccountInUse(BookkeepingError):
    """The ledger is referenced by vouchers or journal lines."""
    code = "account_in_use"


class UnknownAccount(BookkeepingError):
    """A referenced ledger does not exist for the company."""
    code = "unknown_account"


class InvalidVoucherType(BookkeepingError):
    """The voucher type is not recognized."""
    code = "invalid_voucher_type"


class MissingLineItems(BookkeepingError):
    """This voucher type requires at least one line item."""
    code = "missing_line_items"


class UnbalancedEntry(BookkeepingError):
    """Debit and credit totals do not match."""
    code = "unbalanced_entry"


class InvalidAmount(BookkeepingError):
    """A monetary amount or quantity is missing, non-numeric or not positive."""
    code = "invalid_amount"


class ItemNotFound(BookkeepingError):
    """A referenced stock item does not exist for the company."""
    code = "item_not_found"


class InsufficientStock(BookkeepingError):
    """Not enough stock on hand for the requested quantity."""
    code = "insufficient_stock"


class OpeningBalanceAlreadyExists(BookkeepingError):
    """The company already has an opening balance voucher."""
    code = "opening_balance_already_exists"


class OpeningBalanceLockedAfterPostings(BookkeepingError):
    """Opening balance cannot change once journal lines reference the ledger."""
    code = "opening_balance_locked"


class ForbiddenField(BookkeepingError):
    """The payload contains a field that cannot be set by the caller."""
    code = "forbidden_field"


class InvalidVoucherState(BookkeepingError):
    """The voucher's current state does not allow this operation."""
    code = "invalid_voucher_state"
