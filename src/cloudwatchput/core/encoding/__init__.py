"""Wire encoders for metric data."""
