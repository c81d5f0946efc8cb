"""termstat command-line application."""
