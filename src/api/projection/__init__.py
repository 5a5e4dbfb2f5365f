"""Projection bounded context.

Consumes domain events from the delivery channel and folds them, exactly
once in effect, into the read-model materialized views.
"""
