"""Terminal presentation for mongopeek."""
