"""Build-status routing — emits build lifecycle events to the status webhook."""
