"""Class payroll package.

Feature modules (events, attendance, approvals, payroll, ...) each carry a
domain model, a repository protocol with its MySQL implementation, a service
and a thin Flask controller.
"""
