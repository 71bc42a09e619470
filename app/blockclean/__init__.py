"""blockclean - disk-space janitor for Spark block manager and cache directories."""

__version__ = "0.1.0"
