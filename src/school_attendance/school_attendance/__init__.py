"""School Attendance package.

Feature modules (attendance marking, analytics, reports, students) each keep
a model, a repository interface with a MySQL implementation, a service and a
thin Flask controller.
"""
