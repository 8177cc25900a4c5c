"""Language Server Protocol front end."""
