"""blogsync - client-side state for a blog publishing service."""
