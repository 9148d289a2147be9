"""
Crmgate Modules

Leaf-first: storage and transport, api (models and envelope decoding),
auth (challenge and login handshakes), session (cached session lifecycle),
gateway (public record operations). Each module is used only through the
names its package exports.
"""
