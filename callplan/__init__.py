"""
Call-plan dashboard core.

Scheduling and outcome tracking for a real-estate agent's daily call plan:
propensity tiers, property signals, follow-up cadence, reminder buckets
and the unified daily agenda.
"""

__version__ = "0.4.0"
