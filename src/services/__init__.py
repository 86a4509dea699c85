"""
Pipeline services for Duo Stats.

Contains the stages that turn stored records into statistics:
- Record Source (ingestion)
- Record Normalization
- Stats Aggregator
- Stats Reporter
"""
