"""Core enumerations shared by the containers and engines."""
