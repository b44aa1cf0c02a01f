"""Infrastructure: relational persistence, Redis cache and their exceptions."""
