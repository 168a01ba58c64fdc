"""
Trade Credit Reference System - credit-monitoring alert client.

Main Features:
- Envelope-aware async client for the credit-monitoring REST API
- Alert paging, mark-read and acknowledgement
- Shared statistics store feeding unread badges across dashboard surfaces
- Headless list, detail and dashboard view models
- Monitoring setup management
"""

__version__ = "1.0.0"
