"""
Core modules for Legosphere.

This package contains generation routing, usage metering, and
structured extraction of legal analyses.
"""
