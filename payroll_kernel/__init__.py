"""
Payroll Kernel

The pure core of the French payroll calculation engine:
- Typed, code-carrying exceptions
- Structured JSON logging
- Exact Decimal arithmetic for every monetary value
- Time-versioned payroll parameters and their resolution
- Optional SQLAlchemy persistence for the parameter table
"""

__version__ = "0.1.0"
