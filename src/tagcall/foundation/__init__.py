"""Foundation - configuration and error handling shared by every layer."""
