"""
Zion SDK - address resolution and Horizon request construction

This package implements the parts of the Zion client SDK that talk to the public
HTTP services around the ledger: resolving human-readable federation addresses to
account ids, discovering a domain's services through its zion.toml descriptor, and
building filtered, paginated queries against the Horizon API.

Key Components:
- resolve: Descriptor (zion.toml) and federation resolution
- horizon: Query filter composition and resource call builders
- http: The aiohttp-based GET transport used by everything above
- config: Process defaults and per-call resolver options
- errors: The exception taxonomy raised to callers
- strkey: Account id (strkey) validation

Architecture Overview:
1. Federation Resolution:
   - `bob*acme.com` is split into name and domain
   - https://acme.com/.well-known/zion.toml is fetched and FEDERATION_SERVER read
   - The federation server is queried and its record validated

2. Query Construction:
   - A call builder accumulates filters and query parameters for one resource
   - The last filter decides the request path, query parameters are layered on
   - The composed URL is fetched and collection responses become pages

Every network operation is a coroutine running on a caller-supplied
aiohttp.ClientSession. Nothing is cached between calls.
"""
