"""Qt bridges for the client core."""
