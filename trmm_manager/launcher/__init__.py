"""customtkinter launcher window."""
