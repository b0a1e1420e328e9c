"""
지갑 코어

계좌 원장, 거래 기록기, 이력 조회, 사용자 서비스.
모든 서비스는 SQLiteAdapter를 생성자로 주입받는다.

사용 예시:
```python
from core.wallet import AccountLedger, HistoryQuery, TransactionRecorder

ledger = AccountLedger(db)
recorder = TransactionRecorder(db, ledger)
history = HistoryQuery(db)

account_id = await ledger.create_account(user_id, "1000")
await recorder.record_withdrawal(account_id, "100")
recent = await history.history_for_account(account_id, limit=5)
```
"""

from core.wallet.history import HistoryQuery
from core.wallet.ledger import AccountLedger, validate_amount
from core.wallet.models import Account, Transaction, User
from core.wallet.recorder import TransactionRecorder
from core.wallet.users import UserService

__all__ = [
    # 서비스
    "AccountLedger",
    "TransactionRecorder",
    "HistoryQuery",
    "UserService",
    # 엔티티
    "User",
    "Account",
    "Transaction",
    # 검증
    "validate_amount",
]
