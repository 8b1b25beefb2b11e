"""Squad rating domain modules."""
