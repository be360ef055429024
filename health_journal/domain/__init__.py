"""Domain models: journal entries and the derived analysis results."""
