"""Local (in-process) infrastructure implementations."""
