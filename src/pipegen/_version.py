__version__ = "0.1.0"
__build_date__ = "2026-10-19"
