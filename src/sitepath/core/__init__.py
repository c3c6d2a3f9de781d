"""Core item resolution: tree access, name matching and the resolver."""
