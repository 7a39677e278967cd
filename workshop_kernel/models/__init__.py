"""ORM models.  Importing this package registers every table on Base.metadata."""

from workshop_kernel.models.pay_period import PayPeriodEventModel, PayPeriodModel

__all__ = ["PayPeriodEventModel", "PayPeriodModel"]
