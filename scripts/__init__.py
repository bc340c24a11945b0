"""
Scripts Module

Utility scripts for database setup.

Available scripts:
    - seed_data.py: Creates demo admin/support/customer users and tickets

Usage:
    python -m scripts.seed_data
"""
