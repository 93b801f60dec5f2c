"""hrdesk: leave and overtime request rules for the HR/payroll desk."""

__version__ = "0.1.0"
