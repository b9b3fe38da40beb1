"""Built-in handlers for server-initiated requests and notifications."""
