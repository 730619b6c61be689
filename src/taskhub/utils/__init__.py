"""Application plumbing: routers, error handlers, metrics and banner."""
