"""Database infrastructure - engines, sessions and declarative bases."""
