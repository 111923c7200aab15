"""Path utilities for matching local files to server components."""
