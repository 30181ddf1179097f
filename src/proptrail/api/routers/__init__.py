"""Route modules mounted by :func:`proptrail.api.app.create_app`."""
