"""contractguard command-line interface."""
