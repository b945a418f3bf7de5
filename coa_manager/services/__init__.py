"""Business logic for the chart of accounts."""
