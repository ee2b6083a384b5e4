"""
Housing Kernel

The application-lifecycle, eligibility and inventory engine for public
housing projects, with:
- One active application per applicant
- Inventory that never goes negative or above its total
- Atomic booking and withdrawal restitution
- Officer duty windows that never overlap
- Whole-table flat-record persistence with escaped packed fields
"""

__version__ = "0.1.0"
