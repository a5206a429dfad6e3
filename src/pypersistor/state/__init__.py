"""State layer.

Everything that knows about the shape of the application state lives here:
accessors over the state container, change detection between snapshots, and
the store contract the persistor subscribes to.
"""
