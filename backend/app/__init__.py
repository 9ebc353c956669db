"""Style check-in backend."""
