"""
Address Resolution

This package resolves Zion federation addresses and account ids to canonical federation
records, and fetches the zion.toml descriptors that advertise a domain's services.

Key Components:
- descriptor.py: zion.toml fetching and parsing
- federation.py: Federation server discovery and lookups
- __main__.py: CLI interface for resolution

Resolution Types:
1. Descriptor Resolution
   - https://{domain}/.well-known/zion.toml fetched with a 100 KiB cap
   - Parsed as TOML, parse errors reported with line and column

2. Federation Resolution
   - Account ids are validated locally and returned without a request
   - name*domain addresses go through the domain's FEDERATION_SERVER
   - Lookups by name, account id and transaction id

The resolution flow typically follows these steps:
1. Parse the input to determine if it's an account id or a federation address
2. For federation addresses, resolve the domain's zion.toml
3. Query the advertised federation server with type=name
4. Validate the record (memo must be a string) and return it
"""
