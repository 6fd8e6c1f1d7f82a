from tripwage.models.order import Order
from tripwage.models.user import User
from tripwage.models.work_time import WorkTime

__all__ = ["Order", "User", "WorkTime"]
