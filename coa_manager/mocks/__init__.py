"""Mock implementations for development and testing."""
