"""DreamHost: a catalog of meals and drinks, with favorites and personal recipes."""
