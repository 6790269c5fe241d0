"""Collection orchestration: per-cycle work, reconciliation and the polling loop."""
