"""Terminal dashboard for Thought Sort."""
