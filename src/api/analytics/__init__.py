"""Analytics bounded context.

Read side of the pipeline: point lookups against the materialized views
and the staleness indicator of the read model.
"""
