"""
Tests for the Omniscope engine
"""
