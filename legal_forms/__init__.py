"""Real estate document forms and PDF generation"""

__version__ = "0.1.0"
