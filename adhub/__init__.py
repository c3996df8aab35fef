"""AD Hub schedule backend: game import/export and Google Calendar sync."""
