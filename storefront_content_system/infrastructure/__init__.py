"""Infrastructure: remote generator, content store, local cache and logging."""
