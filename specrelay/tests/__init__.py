"""Test suite for specrelay."""
