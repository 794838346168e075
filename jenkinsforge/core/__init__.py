"""Goal execution core — resolve, reconcile, trigger, stream, map."""
