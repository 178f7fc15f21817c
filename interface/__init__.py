"""Front ends over a GameSession: terminal game and HTTP adapter."""
