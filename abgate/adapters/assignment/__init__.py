"""Session assignment stores.

Sticky experiment assignments live behind ``AbstractAssignmentStore`` so the
in-process table can be replaced by an external cache.
"""
