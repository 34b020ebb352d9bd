"""
Core recording engine for callorder.

Contains the call event model, the thread-safe recorder, the expected-call
patterns with their matching algorithm, and mismatch reporting.
"""
