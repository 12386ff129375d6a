from .balances import Balance, closing_balance, present, signed_balance
from .inventory import adjust_stock, low_stock_items, update_stock
from .ledgers import (create_ledger, deactivate_ledger, get_or_create_ledger,
                      list_ledgers, provision_system_accounts, update_ledger)
from .posting import (cancel_voucher, create_opening_balance, create_voucher,
                      post_voucher)
from .reports import (balance_sheet, ledger_statement, profit_and_loss,
                      trial_balance)
from .vouchers import (list_vouchers, record_payment, update_voucher,
                       voucher_summary)
