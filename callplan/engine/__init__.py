"""
Pure call-plan engine: signals, tiers, cadence, time buckets and agenda.
Nothing in this package performs I/O.
"""
