from .company import Company, Membership
from .item import Item, StockMovement
from .journal import JournalLine
from .ledger import Ledger
from .voucher import Voucher, VoucherItem
