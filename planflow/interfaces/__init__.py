"""Abstract interfaces for repositories and external providers."""
