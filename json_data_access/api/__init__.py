"""HTTP surface exposing the providers to a host system."""
