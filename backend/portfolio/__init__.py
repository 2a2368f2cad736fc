"""
Portfolio - project portfolio tracker with activities, milestones and dependencies.
"""

__version__ = "0.1.0"
