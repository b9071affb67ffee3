"""IO - stream adapters."""
