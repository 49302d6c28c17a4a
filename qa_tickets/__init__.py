"""
Knowledge Base QA Ticket Automation.

This package scans recently edited Help Center articles across Zendesk
brands and files quality assessment tickets on behalf of their authors.
"""

__version__ = "1.0.0"
__author__ = "Automation Engineer"
