"""Example configuration plugin writing a single value."""


def load(store):
    store.set("plugin-sync", "plugin sync loaded")
    return "plugin-sync"
