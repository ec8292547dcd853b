"""
World Layoffs - cleaning and exploratory analysis of company layoff events.

Package modules:
- loader: CSV export to source table
- database: staging copies, table reads and writes
- deduplication, normalizers, backfill, cleaning: the cleaning stages
- analysis: read-only reports over the clean table
"""

__version__ = "1.0.0"
