"""HTTP API: application factory, routes and error handling."""
