"""Test suite for phishtank_mcp."""
