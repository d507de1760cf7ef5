"""Search nearby orchestration.

1. Eligibility check: trigger and target rendered on the same surface
2. Buffer the trigger feature (remote geometry service)
3. Query the target data source with the buffer polygon
4. Reconcile the target's rendered selection with the matches
"""
