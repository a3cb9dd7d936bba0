"""Shift Pay package.

Tracks the one active work shift and computes pay under day multipliers,
time-of-day bonus windows and unpaid (manual or scheduled) breaks.
Organized by feature modules with a thin Flask controller layer and
service/repository layers behind Protocols.
"""
