"""
Task subsystem.

Components:
- task_models.py: data structures (TaskHandle, TaskRegistration, HistoryEntry, Marker)
- task_registry.py: period validation, handle issuing, execution ledger
- task_group.py: fairness group for tasks sharing a named period
- task_selector.py: cold/warm selection of the next task and its wait
- task_scheduler.py: single-flight run loop that dispatches the chosen task
"""
