"""Test suite for aqlkit."""
