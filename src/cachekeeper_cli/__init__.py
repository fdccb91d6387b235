"""Command line tools for inspecting cachekeeper stores."""
