"""Core engine components: errors, batch executor, undo controller, search."""
