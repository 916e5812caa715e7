"""Time Tracking package.

Feature modules (sessions, statistics, users) each keep a pure domain core,
a Protocol repository contract, a MySQL implementation and a thin Flask
controller layer.
"""
