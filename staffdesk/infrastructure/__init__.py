"""Infrastructure: storage, in-memory repositories, HTTP clients and retry."""
