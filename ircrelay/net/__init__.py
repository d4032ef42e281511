"""Socket side of the relay: upstream dialing and the listening server."""
