"""CareerNest payments backend."""
