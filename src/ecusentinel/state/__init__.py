"""State/store layer.

This package is the single source of truth for the live dashboard: the
latest status of every ECU and the bounded trouble-code log. Monitoring
loops write into it; renderers only ever read snapshots.
"""
