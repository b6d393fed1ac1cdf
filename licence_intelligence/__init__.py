"""Licence Intelligence Analytics Engine.

Derives utilisation and spend KPIs, licence-hygiene issues, proactive
alerts, month-over-month trends and right-sizing recommendations from a
periodic Microsoft 365 licence inventory extract.
"""

__version__ = "0.1.0"
__author__ = "Cloud Governance Team"
