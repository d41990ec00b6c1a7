"""Physics backends implementing the crawler physics interfaces."""
