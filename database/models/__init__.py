from database.models.base import Base
from database.models.wallet import Wallet, WALLET_STATUS_ACTIVE
from database.models.wallet_balance import WalletBalance
from database.models.wallet_event import WalletEvent, EVENT_KINDS
from database.models.rule_evaluation import RuleEvaluation
