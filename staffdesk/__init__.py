"""
staffdesk: client-side core of the employee/project dashboard.

Entry point: `staffdesk.container.build_app_context()`.
"""

__version__ = "0.1.0"
