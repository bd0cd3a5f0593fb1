"""Command surface of fileward: wire schemas and the command router.

``fileward.routes.commands`` is imported explicitly by callers; this package
initializer stays empty so the schemas can be used by the lower layers
without pulling in the engine.
"""
