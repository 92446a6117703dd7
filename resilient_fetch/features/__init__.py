"""Feature packages for the resilient fetch layer."""
