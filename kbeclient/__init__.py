"""Client-side protocol toolkit for KBEngine game servers: streams, bundles,
data types, entities, entity calls, Blowfish encryption and SDK updating."""

__version__ = "0.1.0"