"""Application services shared by the chat handlers."""
