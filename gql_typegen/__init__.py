"""Generate TypeScript types from GraphQL schemas and documents."""

__version__ = "0.1.0"
