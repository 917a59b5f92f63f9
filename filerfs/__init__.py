"""Access the namespace of a remote filer like a file system."""
