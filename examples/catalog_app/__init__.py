from .demo import (  # noqa: F401
    bootstrap_catalog,
    fetch_books_with_authors,
    run_demo,
    seed_sample_data,
)

__all__ = [
    "bootstrap_catalog",
    "seed_sample_data",
    "run_demo",
    "fetch_books_with_authors",
]
