"""Qt integration for Book Splitter."""
