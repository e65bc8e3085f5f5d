"""
Test Tools Package
Tests for the tools module (notifications, translations)
"""
