"""Internal modules for the REST API SDK.

WARNING: These modules are not part of the public API.

Modules:
    enums - Methods, content types, properties and protocols
    spec - Mutable request state
    trust - Per-connection TLS trust policy
    encoding - One body encoder per content type
    http - httpx client configuration
    transport - Opens the connection and writes the request
    response - Selects the success/error stream and drains it
    redaction - Masks sensitive headers in debug output
"""
