"""
conftest.py — pytest configuration for the full project.
Puts the project root on sys.path so remodel_intake and quote_wizard import
without an install.
"""
import sys
import os

# Add project root to sys.path
sys.path.insert(0, os.path.dirname(__file__))
