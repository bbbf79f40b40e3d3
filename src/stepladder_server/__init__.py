"""stepladder_server — FastAPI REST API for the worksheet SDK.

Exposes the template library, therapist-side assignment management and the
client portal (fill in and submit a worksheet) as a stateless HTTP API.
"""
