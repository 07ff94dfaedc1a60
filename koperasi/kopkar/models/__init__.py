# Load tất cả model vào namespace kopkar.models
from .mixins import TimeStampedModel

from .core import Level, Department, Golongan, LoanLimit
from .account import Employee, User
from .settings import CooperativeSetting, ApprovalFlow
from .approval import Approval, ApprovalStep, ApprovalDecision
from .audit import AuditLog
from .notification import EmailConfig, EmailLog
from .loan import (
    LoanApplication, CashLoanDetail, GoodsReimburseDetail, GoodsOnlineDetail, GoodsPhoneDetail,
    LoanDisbursement, LoanAuthorization, LoanInstallment,
)
from .deposit import (
    DepositAmountOption, DepositTenorOption, DepositApplication, DepositWithdrawal, DepositChangeRequest,
)
from .savings import SavingsAccount, SavingsTransaction, SavingsWithdrawal
from .member import MemberApplication
from .repayment import LoanRepayment
from .payroll import PayrollPeriod

__all__ = [
    "TimeStampedModel",
    "Level", "Department", "Golongan", "LoanLimit",
    "Employee", "User",
    "CooperativeSetting", "ApprovalFlow",
    "Approval", "ApprovalStep", "ApprovalDecision",
    "AuditLog",
    "EmailConfig", "EmailLog",
    "LoanApplication", "CashLoanDetail", "GoodsReimburseDetail", "GoodsOnlineDetail", "GoodsPhoneDetail",
    "LoanDisbursement", "LoanAuthorization", "LoanInstallment",
    "DepositAmountOption", "DepositTenorOption", "DepositApplication", "DepositWithdrawal", "DepositChangeRequest",
    "SavingsAccount", "SavingsTransaction", "SavingsWithdrawal",
    "MemberApplication",
    "LoanRepayment",
    "PayrollPeriod",
]
