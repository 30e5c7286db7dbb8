"""
Token Service package.

Issues and verifies HMAC-signed JSON Web Tokens (HS256/HS384/HS512):

- app.encoding: unpadded base64url segment codec.
- app.signing: HMAC signer and algorithm registry.
- app.claims: registered claim names, the injection/validation pipeline,
  and ready-made claim policies.
- app.config: the configuration facade contract the engine consumes.
- app.engine: the encode/decode state machines.
- app.validation: result-returning verification and refresh helpers.

Design notes:
- Keep the package import side-effects minimal; importing must not read
  settings or secrets. Configuration is passed to the engine explicitly.
- Use the shared/ utilities for logging, metrics, settings, and errors.
- Every call is stateless; the secret is read once per call and never stored.
"""
