"""Command-line application for MyHub."""
