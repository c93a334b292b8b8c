"""
Command-line interface: scan, replay, ingest, watch, health.
"""
