"""Movie payload parsing."""
