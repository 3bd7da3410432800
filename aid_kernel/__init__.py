"""
Aid Kernel - order consolidation core

Read-side kernel for the beneficiary aid programme:
- ORM mappings of the hosted allocation and order tables
- Read-only selectors returning frozen DTOs
- Typed exceptions and structured JSON logging
"""

__version__ = "0.1.0"
