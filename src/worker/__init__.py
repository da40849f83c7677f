"""Background workers for invoicing service"""
from .overdue_reminder import OverdueReminderWorker

__all__ = ["OverdueReminderWorker"]
