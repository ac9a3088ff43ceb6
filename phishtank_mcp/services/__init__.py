"""PhishTank data access services."""
