"""GRC Audit Workpapers.

ISO/IEC 27001:2022 audit planning: template categories, category selection,
workpaper generation on submit-for-review, and findings tracking.
"""

__version__ = "0.1.0"
