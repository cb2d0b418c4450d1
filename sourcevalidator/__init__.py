"""SourceValidator: check that a link's content matches a query."""
