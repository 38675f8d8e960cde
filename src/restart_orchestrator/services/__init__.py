"""Service layer: cluster access and the restart reconcile loop."""
