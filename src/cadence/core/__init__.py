"""
Core building blocks shared by the scheduler.

Components:
- ports.py: Protocols the scheduler depends on (Clock, TaskObserver)
- clock.py: real monotonic clock and the `sleep` delay primitive
- events.py: typed outcome events and the observer hub
"""
