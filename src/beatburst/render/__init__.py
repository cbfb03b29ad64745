"""pygame rendering."""
