"""Scheduler module for periodic reminder tasks.

Schedule overview:
  - 09:00 daily (configurable) - Push reminders for coupons expiring in 7/3/1 days
"""
