"""
Cancellations Domain

Late-cancellation fee state machine (not_applicable -> pending -> dismissed | charged)
and the operator actions that resolve a pending fee.
"""
