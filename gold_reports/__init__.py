"""
Gold Layer Reports

Product and customer analytics computed over a Gold layer star schema.
"""

__version__ = "1.0.0"
