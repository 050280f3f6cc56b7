"""Guild attendance and shift-report service.

The package is organized by feature modules (users, mains, attendance,
shift_reports) with a thin Flask controller layer on top of service and
repository layers.
"""
